"""Factory for building the session's script sandbox from settings."""

import logging

from mudrules.config import SandboxSettings, ScriptLanguage
from mudrules.models import VariableStore

from .base import Capabilities, ScriptSandbox
from .evaluator import EvaluatorSandbox
from .lua import LuaSandbox

logger = logging.getLogger(__name__)


def build_sandbox(
    settings: SandboxSettings,
    variables: VariableStore,
    capabilities: Capabilities,
    *,
    echo_errors: bool = True,
) -> ScriptSandbox:
    """Build the sandbox selected for this session.

    Args:
        settings: Sandbox settings naming the back-end
        variables: The session's variable store
        capabilities: Host callables exposed to scripts
        echo_errors: Echo script errors to the session output

    Returns:
        A sandbox instance; callers never branch on its type
    """
    sandbox: ScriptSandbox
    if settings.backend == ScriptLanguage.PYTHON:
        sandbox = EvaluatorSandbox(variables, capabilities, echo_errors=echo_errors)
    else:
        sandbox = LuaSandbox(
            variables,
            capabilities,
            echo_errors=echo_errors,
            unpack_returned_tuples=settings.lua_unpack_returned_tuples,
        )
    logger.debug("Built %s sandbox", sandbox.language.value)
    return sandbox
