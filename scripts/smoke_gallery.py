import argparse
import pathlib
import sys

ROOT = pathlib.Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from recipe_gallery.app.infra.storage.s3_provider import S3StorageProvider
from recipe_gallery.services.recipe_inference import RecipeInferenceClient


def main() -> None:
    parser = argparse.ArgumentParser(description="Quick gallery smoke test against the real bucket and Gemini")
    parser.add_argument("--limit", type=int, default=3, help="How many images to describe")
    parser.add_argument("--metadata", action="store_true", help="Also print HEAD metadata for each image")
    args = parser.parse_args()

    storage = S3StorageProvider()
    inference = RecipeInferenceClient()

    urls = storage.list_eligible_images()
    print(f"{len(urls)} images under {storage.prefix}")

    for url in urls[: args.limit]:
        print("\n===", url)
        if args.metadata:
            key = storage.object_key_from_url(url)
            print("metadata:", storage.head_metadata(key))
        recipe = inference.infer(url, bypass_cache=True)
        print(recipe.model_dump_json(indent=2))


if __name__ == "__main__":
    main()
