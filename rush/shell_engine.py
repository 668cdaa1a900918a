# rush/shell_engine.py
#
# Runs one input line: the line is split into `&&` segments, each segment's
# leading alias is expanded, and the segments are evaluated left to right.
# The first failing segment halts the chain. Builtins (exit, pwd, cd, ls) are
# handled here; everything else is spawned with the shell's own stdio.
#
# Working directory and environment live in an explicit ShellContext that
# handlers receive and return, so the engine never calls os.chdir or touches
# os.environ.

import getpass
import logging
import os
import re
import subprocess
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from rush.alias_manager import AliasTable
from rush.chain_parser import parse_line
from rush.directory_scanner import DirectoryError, scan_directory
from rush.listing_renderer import ListingRenderer

logger = logging.getLogger(__name__)

_VAR_PATTERN = re.compile(r"\$(?:(\w+)|\{([^}]*)\})")


@dataclass(frozen=True)
class ShellContext:
    """Working directory and environment seen by commands."""
    cwd: str
    home: str
    username: str
    env: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_process(cls) -> "ShellContext":
        return cls(
            cwd=os.getcwd(),
            home=os.path.expanduser("~"),
            username=getpass.getuser(),
            env=dict(os.environ),
        )

    def with_cwd(self, cwd: str) -> "ShellContext":
        env = dict(self.env)
        env["OLDPWD"] = self.cwd
        env["PWD"] = cwd
        return replace(self, cwd=cwd, env=env)

    def with_exports(self, exports: Dict[str, str]) -> "ShellContext":
        """Applies `export` directives in order; `$VAR` refers to earlier values."""
        env = dict(self.env)
        for key, value in exports.items():
            env[key] = _expand_vars(value, env)
        return replace(self, env=env)

    def resolve_path(self, path: str) -> str:
        return os.path.normpath(os.path.join(self.cwd, path))


def _expand_vars(value: str, env: Dict[str, str]) -> str:
    """Like os.path.expandvars, but against `env` instead of os.environ."""
    def _lookup(match):
        name = match.group(1) or match.group(2)
        return env.get(name, match.group(0))
    return _VAR_PATTERN.sub(_lookup, value)


@dataclass(frozen=True)
class ExecutionOutcome:
    success: bool
    cause: Optional[str] = None
    exit_requested: bool = False

    @classmethod
    def ok(cls) -> "ExecutionOutcome":
        return cls(True)

    @classmethod
    def failed(cls, cause: str) -> "ExecutionOutcome":
        return cls(False, cause)


@dataclass
class ChainResult:
    """What happened to one line: the outcome of every segment that ran."""
    outcomes: List[ExecutionOutcome] = field(default_factory=list)
    exit_requested: bool = False

    @property
    def success(self) -> bool:
        return all(outcome.success for outcome in self.outcomes)

    @property
    def halted(self) -> bool:
        return not self.success


Handler = Callable[[Sequence[str], ShellContext], Tuple[ExecutionOutcome, ShellContext]]


class ShellEngine:
    def __init__(self, config, ui_manager, aliases: AliasTable,
                 context: ShellContext, renderer: Optional[ListingRenderer] = None,
                 runner=subprocess.run):
        self.config = config
        self.ui_manager = ui_manager
        self.aliases = aliases
        self.context = context
        self.renderer = renderer or ListingRenderer(config.get("ls", {}))
        self.runner = runner
        self.builtins: Dict[str, Handler] = {
            "exit": self.handle_exit,
            "pwd": self.handle_pwd,
            "cd": self.handle_cd,
            "ls": self.handle_ls,
        }
        logger.info(f"ShellEngine initialized in '{context.cwd}' with {len(aliases)} aliases.")

    def run_line(self, line: str) -> ChainResult:
        """Parses, resolves and runs every `&&` segment of `line`."""
        chain = [self.aliases.resolve(tokens) for tokens in parse_line(line)]
        return self.run_chain(chain)

    def run_chain(self, chain: Sequence[Sequence[str]]) -> ChainResult:
        result = ChainResult()
        for position, tokens in enumerate(chain):
            outcome, self.context = self.execute_segment(tokens, self.context)
            result.outcomes.append(outcome)
            if outcome.exit_requested:
                result.exit_requested = True
                break
            if not outcome.success:
                skipped = len(chain) - position - 1
                logger.info(f"Chain halted at segment {position} ({outcome.cause}); {skipped} segment(s) skipped.")
                break
        return result

    def execute_segment(self, tokens: Sequence[str], context: ShellContext) -> Tuple[ExecutionOutcome, ShellContext]:
        if not tokens:
            # An alias that expands to nothing leaves nothing to run.
            logger.warning("Empty segment after alias expansion; nothing to execute.")
            self.ui_manager.append_output("⚠️ Empty command cannot be executed.", style_class='warning')
            return ExecutionOutcome.ok(), context

        name, args = tokens[0], list(tokens[1:])
        handler = self.builtins.get(name)
        if handler is not None:
            logger.info(f"Builtin '{name}' with args {args}")
            return handler(args, context)
        return self.spawn_process(name, args, context), context

    # --- Builtins ---

    def handle_exit(self, args, context):
        logger.info("Exit requested.")
        return ExecutionOutcome(True, exit_requested=True), context

    def handle_pwd(self, args, context):
        if not os.path.isdir(context.cwd):
            cause = f"current directory '{context.cwd}' no longer exists"
            self.ui_manager.append_error(f"❌ pwd: {cause}")
            logger.warning(cause)
            return ExecutionOutcome.failed(cause), context
        self.ui_manager.append_output(context.cwd)
        return ExecutionOutcome.ok(), context

    def expand_cd_target(self, args, context) -> str:
        """`~` alone is the home directory, `~` as a prefix becomes /home/<user>."""
        if not args or args[0] == "~":
            return context.home
        target = args[0]
        if target.startswith("~"):
            return target.replace("~", f"/home/{context.username}", 1)
        return target

    def handle_cd(self, args, context):
        target = self.expand_cd_target(args, context)
        new_dir = context.resolve_path(target)

        if not os.path.exists(new_dir):
            cause = "No such file or directory"
        elif not os.path.isdir(new_dir):
            cause = "Not a directory"
        elif not os.access(new_dir, os.X_OK):
            cause = "Permission denied"
        else:
            logger.info(f"Directory changed to: {new_dir}")
            return ExecutionOutcome.ok(), context.with_cwd(new_dir)

        self.ui_manager.append_error(f"❌ cd: '{target}': {cause}")
        logger.warning(f"Failed cd to '{new_dir}': {cause}")
        return ExecutionOutcome.failed(cause), context

    def handle_ls(self, args, context):
        # Always succeeds once invoked: a listing error is reported but never halts the chain.
        flags = {arg for arg in args if arg.startswith("-")}
        paths = [arg for arg in args if not arg.startswith("-")]
        path = context.resolve_path(paths[0]) if paths else context.cwd

        show_hidden = "-a" in flags or "--all" in flags
        try:
            entries = scan_directory(path, show_hidden=show_hidden)
        except DirectoryError as e:
            self.ui_manager.append_error(f"❌ ls: {paths[0] if paths else path}: {e.reason}")
            logger.error(f"ls failed for '{path}': {e.reason}")
            return ExecutionOutcome.ok(), context

        lines = self.renderer.render(
            entries,
            long_format="-l" in flags,
            human_readable="-h" in flags,
            on_error=lambda message: self.ui_manager.append_error(f"❌ ls: {message}"),
        )
        self.ui_manager.print_lines(lines)
        return ExecutionOutcome.ok(), context

    # --- External processes ---

    def spawn_process(self, name: str, args: List[str], context: ShellContext) -> ExecutionOutcome:
        """Runs an external command with inherited stdio and waits for it."""
        logger.info(f"Executing '{name}' with args {args} in '{context.cwd}'")
        try:
            process = self.runner([name] + args, cwd=context.cwd, env=context.env)
        except FileNotFoundError as e:
            cause = f"command not found: '{name}'"
            self.ui_manager.append_error(f"❌ {cause}")
            logger.error(f"{cause}: {e}")
            return ExecutionOutcome.failed(cause)
        except PermissionError as e:
            cause = f"permission denied: '{name}'"
            self.ui_manager.append_error(f"❌ {cause}")
            logger.error(f"{cause}: {e}")
            return ExecutionOutcome.failed(cause)
        except OSError as e:
            cause = f"cannot execute '{name}': {e}"
            self.ui_manager.append_error(f"❌ {cause}")
            logger.exception(f"Error executing '{name}'")
            return ExecutionOutcome.failed(cause)
        except KeyboardInterrupt:
            logger.warning(f"Interrupted while waiting for '{name}'")
            return ExecutionOutcome.failed("interrupted")

        if process.returncode != 0:
            logger.warning(f"Command '{name}' exited with code {process.returncode}")
            return ExecutionOutcome.failed(f"exited with status {process.returncode}")
        return ExecutionOutcome.ok()
