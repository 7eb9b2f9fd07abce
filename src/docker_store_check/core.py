#!/usr/bin/env python3
"""
Core functionality for checking and fixing the layer store of a Docker data root.
"""

from typing import Dict

from .layer import Layer, LayerParseError


class StoreCheckError(Exception):
    """The store check failed as a whole. `count` is -1 in that case."""

    def __init__(self, message, count=-1):
        super().__init__(message)
        self.count = count


class ImageMetadataRemovalError(StoreCheckError):
    pass


class LayerRemovalError(StoreCheckError):
    def __init__(self, message, failed_dirs, count=-1):
        super().__init__(message, count)
        self.failed_dirs = failed_dirs


def find_broken_layers(store) -> Dict[str, Layer]:
    """
    Parse every layer of the store.

    Returns a mapping of layer directory name to the partially parsed layer
    for every layer that failed validation. Directory names are used as keys
    since layers with an unparseable name have no chain ID.
    """
    try:
        layer_dirs = store.read_layers_dir()
    except OSError as e:
        raise StoreCheckError(f"failed to read layers dir {store.layers_dir}: {e}") from e

    broken = {}
    for name in layer_dirs:
        try:
            store.parse_layer_dir(name)
        except LayerParseError as e:
            print(f"layer parse error; dir: {e.layer.dir}, err: {e}")
            broken[name] = e.layer
            continue
        except OSError as e:
            raise StoreCheckError(f"failed to read layer {name}: {e}") from e

        # Valid layers are left as they are. Chain consistency per image and
        # mountability of the overlay are not checked.

    return broken


def remove_broken_layers(store, broken: Dict[str, Layer]) -> int:
    """
    Remove the image DB and then every broken layer.

    A layer that fails to be removed doesn't stop the removal of the others;
    the last failure is raised once all layers were attempted.
    """
    try:
        store.remove_image_metadata()
    except OSError as e:
        raise ImageMetadataRemovalError(f"failed to remove metadata of images: {e}") from e

    last_error = None
    failed_dirs = []
    for layer in broken.values():
        print(f"removing layer: {layer.dir}")
        try:
            layer.remove(store.fs)
        except OSError as e:
            print(f"failed to remove layer: {layer.dir}; err: {e}")
            failed_dirs.append(layer.dir)
            last_error = e

    if last_error is not None:
        raise LayerRemovalError(f"failed to remove broken layers: {last_error}", failed_dirs) from last_error

    return len(broken)


def check_store(store, fix_store: bool = False) -> int:
    """
    Check all layers of a Docker store and optionally remove the broken ones.

    Args:
        store: DockerStore to check
        fix_store: Remove broken layers and the image DB

    Returns:
        Number of broken layers found (or removed when fixing)

    Raises:
        StoreCheckError: if the layer DB can't be read or the removal failed
    """
    broken = find_broken_layers(store)
    print(f"found {len(broken)} broken layers")

    if not broken:
        return 0

    if fix_store:
        return remove_broken_layers(store, broken)

    print("skip broken layers removal")
    return len(broken)
