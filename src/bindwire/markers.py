from typing import Any, NamedTuple


class Inject(NamedTuple):
    """Resolve a constructor parameter from an explicit identifier.

    Attach ``Inject`` metadata to ``typing.Annotated`` when a parameter should
    be satisfied by a string-keyed binding, or by an identifier other than its
    declared type. Contextual overrides are looked up under the same
    identifier.

    Examples:
        .. code-block:: python

            from typing import Annotated


            class Newsletter:
                def __init__(self, mailer: Annotated[Mailer, Inject("mailer")]) -> None:
                    self.mailer = mailer

    """

    abstract: Any
