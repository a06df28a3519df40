"""Kong API controller - reconciles Kong gateway APIs and plugins from Kubernetes resources."""

from kong_api_controller.__version__ import __version__

__all__ = ["__version__"]
