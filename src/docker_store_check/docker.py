"""
Layout of a Docker data root.
"""

import os
from typing import List

from .digest import SHA256
from .layer import Layer, parse_layer
from .utils import LocalFileSystem

DEFAULT_DATA_ROOT = '/var/lib/docker'
DEFAULT_GRAPH_DRIVER = 'overlay2'

IMAGE_DB_DIR = 'imagedb'


class DockerStore:
    """
    Paths of a Docker data root for a single graph driver.

    Nothing is checked on construction, any of the paths may be missing.
    """

    def __init__(self, root: str, graph_driver: str = DEFAULT_GRAPH_DRIVER, fs=None):
        self.root = root
        self.graph_driver = graph_driver
        self.images_dir = os.path.join(root, 'image', graph_driver)
        self.layers_dir = os.path.join(self.images_dir, 'layerdb', SHA256)
        self.graph_driver_dir = os.path.join(root, graph_driver)
        self.fs = fs or LocalFileSystem()

    def read_layers_dir(self) -> List[str]:
        """Names of the layer directories, empty if the layer DB doesn't exist."""
        return self.fs.list_dir(self.layers_dir)

    def parse_layer_dir(self, name: str) -> Layer:
        return parse_layer(os.path.join(self.layers_dir, name), name, self.graph_driver_dir, self.fs)

    def remove_image_metadata(self) -> None:
        """Drop the image DB. Images referencing removed layers would be broken otherwise."""
        self.fs.remove_all(os.path.join(self.images_dir, IMAGE_DB_DIR))

    def __repr__(self):
        return f"DockerStore(root={self.root!r}, graph_driver={self.graph_driver!r})"
