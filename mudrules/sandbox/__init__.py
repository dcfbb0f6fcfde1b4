"""Script execution back-ends sharing one capability surface."""

from .base import Capabilities, ScriptResult, ScriptSandbox
from .evaluator import EvaluatorSandbox
from .factory import build_sandbox
from .lua import LuaSandbox

__all__ = [
    "Capabilities",
    "EvaluatorSandbox",
    "LuaSandbox",
    "ScriptResult",
    "ScriptSandbox",
    "build_sandbox",
]
