"""Parsers for plan schedule slot descriptors."""
from .descriptor_parser import DescriptorParser, parse_descriptor

__all__ = [
    "DescriptorParser",
    "parse_descriptor",
]
