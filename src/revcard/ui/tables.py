"""
Componentes de Tabela para a UI.
"""

from typing import List

from rich import box
from rich.table import Table

from revcard.core.models import CardSecrets, CardSummary
from revcard.ui.console import get_console


def create_table(title: str, columns: List[str]) -> Table:
    """Cria uma tabela padronizada."""
    table = Table(title=title, box=box.ROUNDED, header_style="bold cyan")
    for col in columns:
        table.add_column(col)
    return table


def show_cards_table(cards: List[CardSummary]) -> None:
    """Exibe a lista de cartões."""
    table = create_table("Cartões", ["ID", "Rótulo", "Final", "Estado", "Tipo"])
    for card in cards:
        if card.disposable:
            kind = "[highlight]descartável[/highlight]"
        elif card.virtual:
            kind = "virtual"
        else:
            kind = "físico"
        table.add_row(
            card.id,
            card.label or "-",
            card.last_four or "-",
            card.state or "-",
            kind,
        )
    get_console().print(table)


def show_card_secrets(secrets: CardSecrets) -> None:
    """Imprime PAN em grupos de quatro, validade MM/YY e CVV, um por linha."""
    console = get_console()
    console.print("")
    console.print(f"[secret]{secrets.formatted_pan()}[/secret]")
    console.print(secrets.expiry.formatted() if secrets.expiry else "--/--")
    console.print(secrets.cvv)
