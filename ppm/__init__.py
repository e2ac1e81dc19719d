"""ppm - SWI-Prolog 包管理器"""

__version__ = "0.3.0"
