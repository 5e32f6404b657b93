"""Question/answer capability used by the interactive update session"""

from typing import Protocol


class Prompter(Protocol):
    """Blocking prompt/response channel to the operator"""

    def ask(self, prompt: str) -> str: ...

    def say(self, message: str = "") -> None: ...


class ConsolePrompter:
    """Prompter backed by stdin/stdout"""

    def ask(self, prompt: str) -> str:
        return input(prompt)

    def say(self, message: str = "") -> None:
        print(message)

