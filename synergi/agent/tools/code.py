"""Code execution and UI generation tools."""

import asyncio
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Protocol

from loguru import logger

from synergi.agent.tools.base import Tool
from synergi.agent.tools.models import CodeExecArgs, CodeExecResult, UIGenArgs, UIGenResult


@dataclass
class Execution:
    """Raw outcome of one sandbox run."""
    stdout: str
    stderr: str
    exit_code: int
    timed_out: bool = False


class CodeSandbox(Protocol):
    async def run(self, language: str, code: str) -> Execution: ...


DEFAULT_INTERPRETERS = {
    "python": ("python3", "main.py"),
    "javascript": ("node", "main.js"),
}


def sandbox_env(workdir: str) -> dict[str, str]:
    """Minimal environment for untrusted code."""
    return {
        "PATH": os.environ.get("PATH", os.defpath),
        "HOME": workdir,
        "TMPDIR": workdir,
        "LANG": "C.UTF-8",
        "PYTHONIOENCODING": "utf-8",
    }


class SubprocessSandbox:
    """
    Runs code in a local interpreter inside a fresh temporary directory.

    The directory is removed after every call. A run exceeding `timeout`
    seconds is killed and reported as timed out. The child sees only
    `PATH` plus a HOME and TMPDIR inside the work directory, never the
    server environment and its API keys.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        interpreters: Optional[dict[str, tuple[str, str]]] = None,
    ):
        self.timeout = timeout
        self.interpreters = interpreters or dict(DEFAULT_INTERPRETERS)

    async def run(self, language: str, code: str) -> Execution:
        if language not in self.interpreters:
            raise ValueError(f"Unsupported language: {language}")
        command, filename = self.interpreters[language]

        with tempfile.TemporaryDirectory(prefix="synergi-sandbox-") as workdir:
            script = Path(workdir) / filename
            script.write_text(code, encoding="utf-8")

            process = await asyncio.create_subprocess_exec(
                command,
                str(script),
                cwd=workdir,
                env=sandbox_env(workdir),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            try:
                stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
            except asyncio.TimeoutError:
                process.kill()
                await process.wait()
                return Execution(stdout="", stderr="", exit_code=-1, timed_out=True)

        return Execution(
            stdout=stdout.decode("utf-8", errors="replace").rstrip("\n"),
            stderr=stderr.decode("utf-8", errors="replace").rstrip("\n"),
            exit_code=process.returncode if process.returncode is not None else -1,
        )


class ExecuteCodeTool(Tool):
    """Run a Python or JavaScript snippet and report its output."""

    args_model = CodeExecArgs

    def __init__(self, sandbox: Optional[CodeSandbox] = None):
        self.sandbox = sandbox or SubprocessSandbox()

    @property
    def name(self) -> str:
        return "executeCode"

    @property
    def description(self) -> str:
        return (
            "Execute code in a secure sandbox and return the output. Use for algorithms, "
            "scripts, calculations, data processing; anything that needs to RUN."
        )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "language": {
                    "type": "string",
                    "enum": ["python", "javascript"],
                    "description": "The programming language to execute",
                },
                "code": {
                    "type": "string",
                    "description": "The complete code to execute. Must print/log output.",
                },
            },
            "required": ["language", "code"],
        }

    async def execute(self, args: CodeExecArgs) -> CodeExecResult:
        try:
            run = await self.sandbox.run(args.language, args.code)
        except Exception as e:
            logger.warning(f"Sandbox failure: {e}")
            return CodeExecResult(success=False, error=f"Sandbox error: {str(e) or 'Unknown error'}")

        if run.timed_out:
            return CodeExecResult(success=False, error="Execution timed out")

        if run.exit_code != 0:
            lines = [line for line in run.stderr.splitlines() if line.strip()]
            error = lines[-1] if lines else f"Process exited with code {run.exit_code}"
            return CodeExecResult(
                success=False,
                error=error,
                stdout=run.stdout or None,
                stderr=run.stderr or None,
            )

        return CodeExecResult(
            success=True,
            output=run.stdout or "(no output)",
            stderr=run.stderr or None,
        )


class GenerateUITool(Tool):
    """Hand generated UI code back for live preview. Nothing is executed."""

    args_model = UIGenArgs

    @property
    def name(self) -> str:
        return "generateUI"

    @property
    def description(self) -> str:
        return (
            "Generate a UI component or webpage. Use for landing pages, dashboards, forms, "
            "cards; anything visual. Returns code for live preview, does NOT execute it."
        )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "code": {
                    "type": "string",
                    "description": "The complete HTML (with Tailwind CDN) or React component code",
                },
                "framework": {
                    "type": "string",
                    "enum": ["html", "react"],
                    "description": (
                        "The framework used. Use 'html' for standalone HTML pages (default), "
                        "'react' only if user explicitly asks for React."
                    ),
                },
            },
            "required": ["code", "framework"],
        }

    async def execute(self, args: UIGenArgs) -> UIGenResult:
        kind = "React component" if args.framework == "react" else "HTML page"
        return UIGenResult(
            code=args.code,
            framework=args.framework,
            message=f"UI generated as {kind}. Rendering in live preview.",
        )
