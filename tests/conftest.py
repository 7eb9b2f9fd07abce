import os
import pytest

from docker_store_check.digest import from_bytes, generate_random_id
from docker_store_check.docker import DockerStore
from docker_store_check.layer import (
    CACHE_ID_FILE, DIFF_FILE, SIZE_FILE, PARENT_FILE, LINK_FILE, LOWER_FILE
)

LINK_ID = "SNBGQO2GG7VCPWMLRKED6NNSTK"  # must be LINK_ID_LENGTH long
LOWER = "l/KFPW5XUWPXL26GW47CBVKPKAVQ"


def write(path, content):
    with open(path, 'w') as f:
        f.write(content)


def add_layer(store, base_layer=False, seed=b"foobar beef meet"):
    """Create a valid layer in the store, returns (layer_dir, overlay_dir)."""
    chain_id = from_bytes(seed)
    layer_dir = os.path.join(store.layers_dir, chain_id.encoded)
    os.makedirs(layer_dir)

    cache_id = generate_random_id()
    write(os.path.join(layer_dir, CACHE_ID_FILE), cache_id)
    write(os.path.join(layer_dir, DIFF_FILE), from_bytes(b"foo bar"))
    write(os.path.join(layer_dir, SIZE_FILE), "1024")

    overlay_dir = os.path.join(store.graph_driver_dir, cache_id)
    os.makedirs(overlay_dir)
    write(os.path.join(overlay_dir, LINK_FILE), LINK_ID)

    if not base_layer:
        write(os.path.join(layer_dir, PARENT_FILE), from_bytes(b"foo bar parent"))
        write(os.path.join(overlay_dir, LOWER_FILE), LOWER)

    return layer_dir, overlay_dir


@pytest.fixture
def store(tmp_path):
    return DockerStore(str(tmp_path))


def write_bytes(path, content):
    with open(path, 'wb') as f:
        f.write(content)
