"""
Exception types for mdxformer

Render-local problems never raise; they degrade to a fallback. These
exceptions cover environment and lifecycle failures only.
"""


class MdxformerError(Exception):
    """Base class for mdxformer errors"""
    pass


class TemplateError(MdxformerError):
    """Raised when the template directory cannot be loaded"""
    pass


class WatchTransitionError(MdxformerError):
    """Raised when a watch session is asked to make an illegal move"""
    pass
