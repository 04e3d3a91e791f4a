from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = "0.0.0.0"
    port: int = 1443
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:1442"]

    # Canvas size for procedural compositions
    canvas_width: int = 768
    canvas_height: int = 512
    # Deadline for a single synthesis call, in seconds
    synthesis_timeout: float = 30.0
    # Uploaded base images larger than this are refused
    max_base_image_bytes: int = 10 * 1024 * 1024
    # Pixel ceiling checked from the image header before decoding
    max_base_image_pixels: int = 4096 * 4096
    # Dedicated render threads; a stalled render keeps its thread until it ends
    synthesis_workers: int = 2

    greeting_text: str = (
        "Hi! I'm your visual atelier. Send me an idea and I'll turn it into a "
        "consistent piece of art. You can also load an image to transform it."
    )
    apology_text: str = (
        "I couldn't produce the composition right now. Try again with another "
        "request or reload the page."
    )


settings = Settings()
