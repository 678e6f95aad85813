"""
Vision oracle prompts, response parsing and LangChain model wiring.
"""

from design_importer.pipeline.generation import (
    NO_CHANGES,
    GenerationOracle,
    MalformedOracleOutput,
    ResponseParser,
    VisionOracle,
    parse_oracle_response,
)

__all__ = [
    "NO_CHANGES",
    "GenerationOracle",
    "MalformedOracleOutput",
    "ResponseParser",
    "VisionOracle",
    "parse_oracle_response",
]
