"""
Parsing and validation of layer metadata and the matching overlay2 snapshot.

A layer lives in two places:

    <data-root>/image/overlay2/layerdb/sha256/<chain-id>/   cache-id, diff, size, parent
    <data-root>/overlay2/<cache-id>/                        link, lower

Every check raises a LayerParseError subclass on failure. The partially
built Layer is attached to the error so the caller can still remove it.
"""

import os
from dataclasses import dataclass
from typing import Optional

from .digest import Digest, DigestError, InvalidID, SHA256, parse_digest, parse_size, validate_id
from .utils import LocalFileSystem, byte_length

CACHE_ID_FILE = 'cache-id'
DIFF_FILE = 'diff'
PARENT_FILE = 'parent'
SIZE_FILE = 'size'

LINK_FILE = 'link'
LOWER_FILE = 'lower'

LINK_ID_LENGTH = 26


class LayerParseError(ValueError):
    """A layer failed validation. `layer` holds whatever was parsed before the failure."""

    def __init__(self, message, layer=None):
        super().__init__(message)
        self.layer = layer


class InvalidChainID(LayerParseError):
    pass


class MissingCacheID(LayerParseError):
    pass


class InvalidCacheID(LayerParseError):
    pass


class MissingDiffID(LayerParseError):
    pass


class InvalidDiffID(LayerParseError):
    pass


class MissingSize(LayerParseError):
    pass


class InvalidSize(LayerParseError):
    pass


class InvalidParent(LayerParseError):
    pass


class OverlayError(LayerParseError):
    """An overlay snapshot failed validation. `overlay` is set once its directory is known to exist."""

    def __init__(self, message, overlay=None):
        super().__init__(message)
        self.overlay = overlay


class OverlayMissing(OverlayError):
    pass


class MissingLink(OverlayError):
    pass


class InvalidLinkID(OverlayError):
    pass


class MissingLower(OverlayError):
    pass


class InvalidLower(OverlayError):
    pass


@dataclass
class Overlay:
    dir: str
    link: Optional[str] = None
    lower: Optional[str] = None


@dataclass
class Layer:
    dir: str
    chain_id: Optional[Digest] = None
    cache_id: Optional[str] = None
    diff_id: Optional[Digest] = None
    size: Optional[int] = None
    parent: Optional[Digest] = None
    # known as soon as the cache ID is valid, even if the overlay itself is broken
    overlay_dir: Optional[str] = None
    overlay: Optional[Overlay] = None

    @property
    def is_base(self) -> bool:
        return self.parent is None

    def remove(self, fs=None):
        """Remove the layer metadata directory and, if known, its overlay directory."""
        fs = fs or LocalFileSystem()
        if not self.dir:
            return
        fs.remove_all(self.dir)
        if not self.overlay_dir:
            return
        fs.remove_all(self.overlay_dir)


def parse_layer(layer_dir: str, chain_id: str, graph_driver_dir: str, fs=None) -> Layer:
    """
    Parse a layer directory.

    Args:
        layer_dir: Path of the layer's metadata directory
        chain_id: Directory name, the hex part of the layer's chain ID
        graph_driver_dir: Root of the overlay2 snapshot directories

    Returns:
        The fully validated Layer

    Raises:
        LayerParseError: on the first failed check, with the partial layer attached
        OSError: on I/O errors other than a missing file
    """
    fs = fs or LocalFileSystem()
    layer = Layer(dir=layer_dir)
    try:
        _parse_layer(layer, chain_id, graph_driver_dir, fs)
    except LayerParseError as e:
        e.layer = layer
        raise
    return layer


def _parse_layer(layer, chain_id, graph_driver_dir, fs):
    try:
        layer.chain_id = parse_digest(f"{SHA256}:{chain_id}")
    except DigestError as e:
        raise InvalidChainID(f"invalid chain ID {chain_id!r}: {e}") from e

    # cache ID is a random ID generated by the daemon when the layer is created
    cache_id_path = os.path.join(layer.dir, CACHE_ID_FILE)
    try:
        layer.cache_id = fs.read_file(cache_id_path)
    except OSError as e:
        raise MissingCacheID(f"failed to read cache ID: {e}") from e
    try:
        validate_id(layer.cache_id)
    except InvalidID as e:
        raise InvalidCacheID(f"invalid cache ID in {cache_id_path}: {e}") from e
    layer.overlay_dir = os.path.join(graph_driver_dir, layer.cache_id)

    diff_path = os.path.join(layer.dir, DIFF_FILE)
    try:
        diff = fs.read_file(diff_path)
    except OSError as e:
        raise MissingDiffID(f"failed to read diff ID: {e}") from e
    try:
        layer.diff_id = parse_digest(diff)
    except DigestError as e:
        raise InvalidDiffID(f"invalid diff ID in {diff_path}: {e}") from e

    size_path = os.path.join(layer.dir, SIZE_FILE)
    try:
        size = fs.read_file(size_path)
    except OSError as e:
        raise MissingSize(f"failed to read size: {e}") from e
    try:
        layer.size = parse_size(size)
    except ValueError as e:
        raise InvalidSize(f"invalid size in {size_path}: {e}") from e

    # no parent file means a base layer
    parent_path = os.path.join(layer.dir, PARENT_FILE)
    if fs.exists(parent_path):
        try:
            layer.parent = parse_digest(fs.read_file(parent_path))
        except (OSError, DigestError) as e:
            raise InvalidParent(f"invalid parent in {parent_path}: {e}") from e

    try:
        layer.overlay = new_overlay(layer.overlay_dir, layer.is_base, fs)
    except OverlayError as e:
        layer.overlay = e.overlay
        raise


def new_overlay(overlay_dir: str, base_layer: bool, fs=None) -> Overlay:
    """Validate the overlay2 snapshot directory of a layer."""
    fs = fs or LocalFileSystem()

    if not fs.exists(overlay_dir):
        raise OverlayMissing(f"layer's overlay dir doesn't exist: {overlay_dir}")

    overlay = Overlay(dir=overlay_dir)

    link_path = os.path.join(overlay_dir, LINK_FILE)
    try:
        overlay.link = fs.read_file(link_path)
    except OSError as e:
        raise MissingLink(f"failed to read link ID: {e}", overlay) from e
    if byte_length(overlay.link) != LINK_ID_LENGTH:
        raise InvalidLinkID(f"a link ID file contains an invalid content/ID: {link_path}", overlay)

    if not base_layer:
        lower_path = os.path.join(overlay_dir, LOWER_FILE)
        try:
            overlay.lower = fs.read_file(lower_path)
        except OSError as e:
            raise MissingLower(f"failed to read lower file: {e}", overlay) from e
        # a list of the underlying layers' link IDs, at least one
        if byte_length(overlay.lower) < LINK_ID_LENGTH:
            raise InvalidLower(f"incorrect lower file: {lower_path}", overlay)

    return overlay
