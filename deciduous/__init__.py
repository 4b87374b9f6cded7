"""
Deciduous - attack/defence decision trees for threat modelling.

Compiles YAML threat tree documents into Graphviz DOT, filters them down to
the paths through chosen nodes, and embeds the source document in exported
DOT, SVG and PNG files so it can be recovered later.
"""

__version__ = "1.0.0"

from .compiler import CompileResult, compile_document
from .errors import DecodeError, DeciduousError, EmissionDefect, FilterError, RenderError, ValidationError
from .provenance import append_to_raster_image, embed_in_graph_text, embed_in_vector_image

__all__ = [
    'CompileResult',
    'DecodeError',
    'DeciduousError',
    'EmissionDefect',
    'FilterError',
    'RenderError',
    'ValidationError',
    'append_to_raster_image',
    'compile_document',
    'embed_in_graph_text',
    'embed_in_vector_image',
]
