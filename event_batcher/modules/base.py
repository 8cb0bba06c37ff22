from abc import ABC, abstractmethod


class Module(ABC):
    """A unit the CLI runner can start: ``python -m event_batcher run <name>``.

    ``run()`` walks initialize, validate and execute in order and always
    finishes with teardown, even when an earlier step raised. Only
    ``execute`` is mandatory; its return value becomes the exit code.
    """

    async def initialize(self) -> None:
        """Read config and build collaborators."""

    async def validate(self) -> None:
        """Check the outside world before serving."""

    @abstractmethod
    async def execute(self) -> int: ...

    async def teardown(self) -> None:
        """Release what initialize/execute acquired."""

    async def run(self) -> int:
        try:
            await self.initialize()
            await self.validate()
            return await self.execute()
        finally:
            await self.teardown()
