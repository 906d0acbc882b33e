from importlib import metadata

try:
    __version__ = metadata.version("heloc-accelerator")
except metadata.PackageNotFoundError:  # pragma: no cover - not installed, e.g. tests run from the repo root
    __version__ = "0.1.0"
