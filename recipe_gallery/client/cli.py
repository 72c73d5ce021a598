from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from recipe_gallery.app.domain.errors import UploadInProgressError
from recipe_gallery.app.schemas.recipe import RecipeRecord
from recipe_gallery.client.session import GallerySession


def _minutes(value: float) -> str:
    return f"{value:g} min"


def format_recipe_card(recipe: RecipeRecord) -> str:
    lines = [recipe.title, "=" * len(recipe.title), ""]
    lines.append(f"Prep: {_minutes(recipe.preparationTime)}")
    lines.append(f"Cook: {_minutes(recipe.cookingTime)}")
    lines.append(f"Servings: {recipe.servings}")
    lines.append(f"Cuisine: {recipe.cuisine.value}")
    if recipe.dietaryRestrictions:
        lines.append("Dietary: " + ", ".join(r.value for r in recipe.dietaryRestrictions))

    lines += ["", "Ingredients"]
    lines += [f"  • {item}" for item in recipe.ingredients]

    lines += ["", "Instructions"]
    lines += [f"  {i}. {step}" for i, step in enumerate(recipe.instructions, start=1)]
    return "\n".join(lines)


def _browse(session: GallerySession, index: int | None) -> int:
    state = session.load()
    if state.error:
        print(f"error: {state.error}", file=sys.stderr)
        return 1
    if state.is_empty:
        print("No images in the gallery.")
        return 0

    for i, url in enumerate(state.image_urls):
        marker = ">" if i == state.cursor else " "
        print(f"{marker} [{i}] {url}")

    if index is not None:
        for _ in range(index % len(state)):
            state = session.advance()
        state = session.reveal_recipe()
        print()
        print(format_recipe_card(state.visible_recipe))
    return 0


def _upload(session: GallerySession, path: Path) -> int:
    try:
        state = session.upload(path)
    except UploadInProgressError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    if state.error:
        print(f"error: {state.error}", file=sys.stderr)
        return 1

    print(state.notification)
    print(state.image_urls[0])
    print()
    print(format_recipe_card(state.recipes[0]))
    return 0


def _serve(host: str, port: int) -> int:
    import uvicorn

    uvicorn.run("recipe_gallery.app.main:app", host=host, port=port)
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="recipe-gallery", description="Browse and upload recipe images")
    ap.add_argument("--api", default="http://localhost:8000", help="Base URL of the gallery API")
    ap.add_argument("-v", "--verbose", action="store_true")
    sub = ap.add_subparsers(dest="command", required=True)

    browse = sub.add_parser("browse", help="List images and optionally show one recipe")
    browse.add_argument("--index", type=int, default=None, help="Show the recipe of this image")

    upload = sub.add_parser("upload", help="Upload an image and show its recipe")
    upload.add_argument("path", type=Path)

    serve = sub.add_parser("serve", help="Run the API server")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    if args.command == "serve":
        return _serve(args.host, args.port)

    session = GallerySession(base_url=args.api)
    try:
        if args.command == "browse":
            return _browse(session, args.index)
        return _upload(session, args.path)
    finally:
        session.close()


if __name__ == "__main__":
    raise SystemExit(main())
