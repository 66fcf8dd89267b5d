"""
ultra_tournament/render.py - Bracket tree rendering

Draws a tournament as a rich Tree, grand finals at the top, side A listed
before side B under every round. Read-only: rendering never solves or
mutates anything.
"""

from rich.console import Console
from rich.text import Text
from rich.tree import Tree

from ultra_tournament.errors import PrintFailureError
from ultra_tournament.tournament import Tournament
from ultra_tournament.types import EntrantNode


def node_label(tournament: Tournament, node_id: int) -> Text:
    """Label for one node: the entrant, or the round's winner and outcome."""
    node = tournament.node(node_id)
    winner = tournament.winner_entrant(node_id)

    if winner is None:
        return Text("Incomplete", style="dim")

    with winner.read() as guard:
        name = str(guard.value)

    if isinstance(node, EntrantNode):
        return Text(name)

    label = Text(name, style="bold green")
    label.append(f" ({node.state})", style="cyan")
    return label


def render_tournament(tournament: Tournament) -> Tree:
    """
    Build a rich Tree of the whole bracket.

    Raises:
        PrintFailureError: the bracket couldn't be walked or a label
            couldn't be formatted (broken graph, bad entrant ids, an
            entrant or metadata whose __str__ raises)
    """
    try:
        root = Tree(node_label(tournament, tournament.grand_finals))
        stack = [(tournament.grand_finals, root)]

        while stack:
            node_id, branch = stack.pop()
            if isinstance(tournament.node(node_id), EntrantNode):
                continue
            for child_id in tournament.child_nodes(node_id):
                child_branch = branch.add(node_label(tournament, child_id))
                stack.append((child_id, child_branch))
    except Exception as e:
        raise PrintFailureError(f"Failed to render tournament: {e}") from e

    return root


def print_tournament(tournament: Tournament, console: Console | None = None) -> None:
    """Print the bracket tree to the console (stdout by default).

    Raises:
        PrintFailureError: rendering or writing to the console failed
    """
    tree = render_tournament(tournament)
    console = console or Console()
    try:
        console.print(tree)
    except Exception as e:
        raise PrintFailureError(f"Failed to print tournament: {e}") from e


__all__ = ["node_label", "render_tournament", "print_tournament"]
