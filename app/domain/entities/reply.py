from dataclasses import dataclass


@dataclass(frozen=True)
class Choice:
    label: str
    token: str


@dataclass(frozen=True)
class RenderInstruction:
    text: str
    choices: tuple[Choice, ...] = ()

    @property
    def tokens(self) -> list[str]:
        return [c.token for c in self.choices]
