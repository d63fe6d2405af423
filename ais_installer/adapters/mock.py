"""
Mock adapter — scripted test double for command execution.

Simulates a host without touching external tools. Responses are keyed
by argv prefix, so a test can say "``systemctl is-active`` fails" or
"``apt-get install`` exits 100" without spelling out full commands.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from ais_installer.adapters.base import Adapter, ExecutionContext
from ais_installer.core.models.action import Action, Receipt

SideEffect = Callable[[Action], None]


class MockAdapter(Adapter):
    """Universal mock adapter for testing.

    By default, returns success for everything. The most specific
    (longest) matching argv prefix decides the response.
    """

    def __init__(
        self,
        adapter_name: str = "mock",
        available: bool = True,
        default_output: str = "",
        dry_run: bool = False,
    ):
        super().__init__(dry_run=dry_run)
        self._name = adapter_name
        self._available = available
        self._default_output = default_output
        # prefix → ("ok", output) or ("failed", error, return_code, missing)
        self._responses: dict[tuple[str, ...], tuple] = {}
        self._side_effects: dict[tuple[str, ...], SideEffect] = {}
        self._call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[ExecutionContext]:
        """All execution contexts this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    @property
    def commands(self) -> list[list[str]]:
        """Argv of every executed action, in order."""
        return [ctx.action.argv for ctx in self._call_log]

    @property
    def action_ids(self) -> list[str]:
        return [ctx.action.id for ctx in self._call_log]

    def is_available(self) -> bool:
        return self._available

    def set_failure(
        self,
        argv_prefix: Sequence[str],
        error: str = "Mock failure",
        return_code: int = 1,
        missing_executable: bool = False,
    ) -> None:
        """Configure every command starting with ``argv_prefix`` to fail."""
        self._responses[tuple(argv_prefix)] = ("failed", error, return_code, missing_executable)

    def set_success(self, argv_prefix: Sequence[str], output: str | None = None) -> None:
        """Configure commands starting with ``argv_prefix`` to succeed.

        Overrides a shorter failing prefix, e.g. fail every ``dpkg-query``
        except one package.
        """
        self._responses[tuple(argv_prefix)] = ("ok", self._default_output if output is None else output)

    def clear_failure(self, argv_prefix: Sequence[str]) -> None:
        self._responses.pop(tuple(argv_prefix), None)

    def on(self, argv_prefix: Sequence[str], effect: SideEffect) -> None:
        """Run ``effect`` when a matching command succeeds."""
        self._side_effects[tuple(argv_prefix)] = effect

    def ran(self, argv_prefix: Sequence[str]) -> bool:
        """Whether any executed command starts with ``argv_prefix``."""
        prefix = tuple(argv_prefix)
        return any(tuple(cmd[: len(prefix)]) == prefix for cmd in self.commands)

    @staticmethod
    def _match(argv: tuple[str, ...], prefixes) -> tuple[str, ...] | None:
        best = None
        for prefix in prefixes:
            if argv[: len(prefix)] == prefix and (best is None or len(prefix) > len(best)):
                best = prefix
        return best

    def execute(self, context: ExecutionContext) -> Receipt:
        action = context.action

        if context.dry_run and not action.read_only:
            return Receipt.skip(adapter=self._name, action_id=action.id, reason="dry-run")

        self._call_log.append(context)
        argv = tuple(action.argv)

        output = self._default_output
        matched = self._match(argv, self._responses)
        if matched is not None:
            response = self._responses[matched]
            if response[0] == "failed":
                _, error, return_code, missing = response
                return Receipt.failure(
                    adapter=self._name,
                    action_id=action.id,
                    error=error,
                    return_code=None if missing else return_code,
                    metadata={"mock": True, "missing_executable": missing},
                )
            output = response[1]

        effect = self._match(argv, self._side_effects)
        if effect is not None:
            self._side_effects[effect](action)

        return Receipt.success(
            adapter=self._name,
            action_id=action.id,
            output=output,
            metadata={"mock": True},
        )

    def reset(self) -> None:
        """Clear call log, scripted responses and side effects."""
        self._call_log.clear()
        self._responses.clear()
        self._side_effects.clear()
