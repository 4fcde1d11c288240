from __future__ import annotations

from dataclasses import dataclass

DEFAULT_HOST = "https://tw.manhuagui.com"

# Image tunnels, selected by index with --tunnel.
TUNNELS = ("i", "eu", "us")


def tunnel_host(index: int) -> str:
    """Returns the image host for a tunnel index, falling back to the first line."""
    name = TUNNELS[index] if 0 <= index < len(TUNNELS) else TUNNELS[0]
    return f"https://{name}.hamreus.com"


@dataclass
class DownloaderConfig:
    tunnel: int = 0
    delay_ms: int = 1000
    output_dir: str = "Downloads"
    skip_existing: bool = True
    verify_images: bool = True
    chapter_delay: float = 5.0
    host: str = DEFAULT_HOST

    @property
    def tunnel_host(self) -> str:
        return tunnel_host(self.tunnel)

    @classmethod
    def from_args(cls, args) -> "DownloaderConfig":
        return cls(
            tunnel=args.tunnel,
            delay_ms=args.delay_ms,
            output_dir=args.output_dir,
            skip_existing=not args.no_skip,
            verify_images=not args.no_verify,
            chapter_delay=args.chapter_delay,
        )
