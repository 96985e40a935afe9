"""Errors raised by cmsblocks collaborators."""


class CmsBlocksError(Exception):
    """Base class for cmsblocks errors."""


class NoSuchEntityError(CmsBlocksError, LookupError):
    """A requested block or store does not exist."""


class TemplateFilterError(CmsBlocksError):
    """Block content could not be compiled as a template."""


__all__ = ["CmsBlocksError", "NoSuchEntityError", "TemplateFilterError"]
