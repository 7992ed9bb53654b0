from importlib.metadata import version

__version__ = version("idlmap")

from .analyzer import IdlAnalysis, analyze_idl
from .type_mapper import TypeMapper, TypeMapperConfig

__all__ = ['IdlAnalysis', 'TypeMapper', 'TypeMapperConfig', 'analyze_idl', '__version__']
