"""Service layer: external collaborators, resolution and reference assembly."""

from .ai_extractor import AiExtractor, ExtractionError, MetadataExtractor
from .archive import WaybackArchiver, WaybackSnapshot
from .citoid import CitoidClient, CitoidError
from .doi import DoiClient, DoiError
from .generator import GenerationError, ReferenceGenerator
from .http import FetchError, HttpFetcher, ResponseError, TransportError
from .resolver import AttributeCollection, MultiSourceAttributeCollection, resolve_attribute
from .translation import HttpTranslator, TranslationError, Translator

__all__ = [
    "AiExtractor",
    "AttributeCollection",
    "CitoidClient",
    "CitoidError",
    "DoiClient",
    "DoiError",
    "ExtractionError",
    "FetchError",
    "GenerationError",
    "HttpFetcher",
    "HttpTranslator",
    "MetadataExtractor",
    "MultiSourceAttributeCollection",
    "ReferenceGenerator",
    "ResponseError",
    "TransportError",
    "TranslationError",
    "Translator",
    "WaybackArchiver",
    "WaybackSnapshot",
    "resolve_attribute",
]
