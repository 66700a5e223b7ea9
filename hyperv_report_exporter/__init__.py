from .version import EXPORTER_VERSION

__version__ = EXPORTER_VERSION
