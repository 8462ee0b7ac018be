"""Event-sourced photo registry: append-only writer and folding reader."""

from .writer import RegistryWriter, strip_image_ext
from .reader import RegistryReader, AliveIndex, fold_records, iter_records

__all__ = ['RegistryWriter', 'strip_image_ext', 'RegistryReader', 'AliveIndex', 'fold_records', 'iter_records']
