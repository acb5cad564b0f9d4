"""An exception type that carries a description and where it was raised."""

import os
import traceback

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))
_THIS_FILE = os.path.abspath(__file__)
_DEBUG_VARIABLE = "GRIDLEARN_FULL_DEBUG"


def wrap_lines_with_tab_prefix(text: str) -> str:
    """Prefix every line of ``text`` with a tab."""
    return "\n".join(f"\t{line}" for line in text.split("\n"))


def _capture_stack() -> str:
    frames = []
    for frame in traceback.extract_stack():
        filename = os.path.abspath(frame.filename)
        if not filename.startswith(_PACKAGE_DIR) or filename == _THIS_FILE:
            continue
        frames.append(f"{frame.filename}:{frame.lineno} {frame.name}")
    return "\t\t\n".join(frames) if frames else "<invalid>"


class LearnError(Exception):
    """Wraps another error together with a description and the call stack."""

    def __init__(self, wrapped=None, description: str = ""):
        super().__init__(description, wrapped)
        self.wrapped = wrapped
        self.description = description
        self.stack = _capture_stack()
        if isinstance(wrapped, BaseException):
            self.__cause__ = wrapped

    def __str__(self) -> str:
        if os.environ.get(_DEBUG_VARIABLE) == "true":
            return "LearnError( {}\n\tCaptured at: {}\n)".format(
                wrap_lines_with_tab_prefix(str(self.wrapped)),
                wrap_lines_with_tab_prefix(self.stack),
            )
        return f"LearnError( {self.description}: {self.wrapped} )"


def describe_error(description: str, err) -> LearnError:
    """Wrap ``err`` with a description."""
    return LearnError(err, description)


def wrap_error(err) -> LearnError:
    """Wrap ``err`` without a description."""
    return LearnError(err, "")


def format_error(err, template: str, *args) -> LearnError:
    """Wrap ``err`` with a description built from ``template.format(*args)``."""
    return describe_error(template.format(*args), err)