"""FlowGen Codecs: animation encoding."""

from .gif import GifCodec

__all__ = ["GifCodec"]
