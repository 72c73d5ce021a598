class ServiceError(Exception):
    pass


class GeminiConfigurationError(ServiceError):
    pass


class ImageFetchError(ServiceError):
    def __init__(self, url: str, reason: str):
        super().__init__(f"Failed to fetch image {url}: {reason}")
        self.url = url
        self.reason = reason


class InferenceFailedError(ServiceError):
    def __init__(self, image_url: str, reason: str = "Error processing the image"):
        super().__init__(f"Recipe inference failed for {image_url}: {reason}")
        self.image_url = image_url
        self.reason = reason


class RateLimitedError(InferenceFailedError):
    pass
