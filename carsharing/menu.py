"""Menu navigation engine.

A menu is a node in a navigation tree: an ordered list of options, each bound
to an action, plus an optional parent that the ``0`` entry leads back to.

Actions do not show the next menu themselves. They return it, and
:func:`navigate` keeps showing whatever the previous step returned until a
step returns ``None``. Re-parenting a menu is therefore a plain assignment to
``Menu.parent``; nothing else remembers where a menu was reached from.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Iterable, Optional

from carsharing.rendering import format_back, format_option, format_title

if TYPE_CHECKING:
    from carsharing.console import ConsoleIO
    from carsharing.session import Session

logger = logging.getLogger(__name__)

Action = Callable[["Session"], Optional["Menu"]]
BeforeShowHook = Callable[["Session", "Option"], Optional["Menu"]]

INVALID_INPUT_MESSAGE = "invalid input, retry"
NO_ACTION_MESSAGE = "No action defined"


class EmptyMenuError(Exception):
    """Raised when a menu without options is about to be printed."""


class Option:
    """A menu entry: a fixed description and a rebindable action."""

    __slots__ = ("_description", "action")

    def __init__(self, description: str, action: Action | None = None) -> None:
        self._description = description
        self.action = action

    @property
    def description(self) -> str:
        return self._description

    def __repr__(self) -> str:
        return f"Option({self._description!r})"


class Menu:
    """An ordered option list with a title and an optional parent."""

    DEFAULT_TITLE = "Choose an option: "
    DEFAULT_EMPTY_MESSAGE = "No options assigned"

    def __init__(
        self,
        options: Iterable[Option] = (),
        title: str | None = DEFAULT_TITLE,
        empty_message: str = DEFAULT_EMPTY_MESSAGE,
        parent: Menu | None = None,
    ) -> None:
        self._options: list[Option] = list(options)
        self.title = title
        self.empty_message = empty_message
        self.parent = parent
        self.sub_menus: list[Menu] = []
        self.selected_option: int | None = None

    def __repr__(self) -> str:
        return f"Menu(title={self.title!r}, options={len(self._options)})"

    @property
    def options(self) -> tuple[Option, ...]:
        return tuple(self._options)

    def selected(self) -> Option | None:
        """Return the option picked in the last show cycle, looked up in the current list."""
        if not self.selected_option or self.selected_option > len(self._options):
            return None
        return self._options[self.selected_option - 1]

    def add_option(self, option: Option) -> None:
        self._options.append(option)

    def set_options_list(self, options: Iterable[Option]) -> None:
        """Replace every option. Sub menu bindings on the old options are not carried over."""
        self._options = list(options)

    def set_title(self, title: str | None) -> None:
        self.title = title

    def set_parent_menu(self, menu: Menu | None) -> None:
        self.parent = menu

    def add_sub_menu(
        self,
        option_index: int,
        sub_menu: Menu,
        before_show: BeforeShowHook | None = None,
        parent: Menu | None = None,
    ) -> None:
        """Bind the option at ``option_index`` (0-based) to open ``sub_menu``.

        ``before_show`` runs first with the session and the selected option;
        if it returns a menu, that menu is shown instead of ``sub_menu``.
        The sub menu's parent becomes ``parent`` when given, else this menu.
        """
        if not 0 <= option_index < len(self._options):
            raise IndexError(
                f"option index {option_index} out of range for menu {self.title!r} "
                f"with {len(self._options)} options"
            )

        def open_sub_menu(session: Session) -> Menu | None:
            if before_show is not None:
                option = self.selected()
                if option is not None:
                    redirect = before_show(session, option)
                    if redirect is not None:
                        return redirect
            return sub_menu

        self._options[option_index].action = open_sub_menu
        sub_menu.parent = parent if parent is not None else self
        if sub_menu not in self.sub_menus:
            self.sub_menus.append(sub_menu)

    def _print(self, io: ConsoleIO) -> None:
        io.print()
        if not self._options:
            raise EmptyMenuError(self.empty_message)
        if self.title is not None:
            io.print(format_title(self.title))
        io.print()
        for idx, option in enumerate(self._options, start=1):
            io.print(format_option(idx, option.description))
        io.print(format_back(self.parent is not None))

    def _read(self, io: ConsoleIO) -> int:
        while True:
            value = io.read_int()
            if value is not None and 0 <= value <= len(self._options):
                self.selected_option = value
                return value
            io.discard_line()
            io.print(INVALID_INPUT_MESSAGE)

    def show(self, session: Session) -> Menu | None:
        """Print, read one valid selection and dispatch it.

        Returns the menu to show next: the selected option's result, the
        parent for ``0`` or for an empty menu, or ``None`` to stop.
        """
        io = session.io
        try:
            self._print(io)
        except EmptyMenuError as exc:
            io.print(str(exc))
            return self.parent

        choice = self._read(io)
        if choice == 0:
            return self.parent

        option = self._options[choice - 1]
        if option.action is None:
            io.print(NO_ACTION_MESSAGE)
            return self
        logger.debug("Menu %r: selected %d (%s)", self.title, choice, option.description)
        return option.action(session)


def navigate(menu: Menu | None, session: Session) -> None:
    """Show menus until a step returns ``None``."""
    while menu is not None:
        menu = menu.show(session)
    logger.debug("Navigation finished")
