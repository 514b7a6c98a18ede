import io
import logging
import os
from datetime import datetime, timezone

from django.conf import settings
from PIL import Image, ImageDraw, ImageFont

logger = logging.getLogger(__name__)

SUMMARY_IMAGE_NAME = "summary.png"
FONT_CANDIDATES = ("DejaVuSans.ttf", "arial.ttf")


class Config:
    @property
    def cache_path(self) -> str:
        """Return absolute cache directory path (writable)."""
        if settings.ENVIRONMENT == "production":
            path = "/tmp/cache"
        else:
            path = os.path.abspath(settings.SUMMARY_CACHE_DIR)
        os.makedirs(path, exist_ok=True)
        return path


config = Config()


def make_multiplier(rng):
    return rng.randint(1000, 2000)


def make_smoothing_factor(rng):
    return rng.uniform(0.9, 1.1)


def get_summary_image_path():
    """Return full path to the summary image in the writable cache."""
    return os.path.join(config.cache_path, SUMMARY_IMAGE_NAME)


def _load_font(size):
    for name in FONT_CANDIDATES:
        try:
            return ImageFont.truetype(name, size)
        except OSError:
            continue
    return ImageFont.load_default()


def format_gdp(value):
    if value is None:
        return "n/a"
    return f"{round(value, 2):,}"


def render_summary_image(summary):
    """
    Render a summary PNG showing total countries, top 5 GDP countries,
    and last refresh timestamp. Returns the encoded bytes.
    """
    img = Image.new("RGB", (800, 500), color="white")
    draw = ImageDraw.Draw(img)

    font_title = _load_font(28)
    font_body = _load_font(20)

    draw.text((20, 20), "Country Summary Report", fill="black", font=font_title)
    draw.text((20, 70), f"Total Countries: {summary.total_countries}", fill="black", font=font_body)
    draw.text((20, 120), "Top 5 Countries by Estimated GDP:", fill="black", font=font_body)

    y = 160
    if not summary.top5_countries:
        draw.text((40, y), "No GDP data available.", fill="gray", font=font_body)
    else:
        for rank, c in enumerate(summary.top5_countries, start=1):
            draw.text((40, y), f"{rank}. {c['name']}: {format_gdp(c['estimated_gdp'])}", fill="blue", font=font_body)
            y += 30

    timestamp = summary.last_refreshed_at.isoformat() if summary.last_refreshed_at else "never"
    draw.text((20, 400), f"Last Refresh: {timestamp}", fill="black", font=font_body)

    buffer = io.BytesIO()
    img.save(buffer, "PNG")
    return buffer.getvalue()


def save_summary_image(data):
    """Write rendered image bytes to the cache, replacing any previous one."""
    path = get_summary_image_path()
    tmp_path = f"{path}.tmp"
    with open(tmp_path, "wb") as fh:
        fh.write(data)
    os.replace(tmp_path, path)
    logger.info("Summary image saved to %s", path)
    return path


def get_now():
    """Return current UTC datetime (aware)."""
    return datetime.now(timezone.utc)
