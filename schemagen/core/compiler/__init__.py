from .descriptor_builder import compile_model
from .instructions import Instruction, InstructionStream, Op
from .validation import validate_model

__all__ = [
    "compile_model",
    "validate_model",
    "Instruction",
    "InstructionStream",
    "Op",
]
