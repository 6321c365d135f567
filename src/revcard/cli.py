"""Ponto de entrada da Interface de Linha de Comando (CLI) do Revcard."""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
from typing_extensions import Annotated

from revcard.adapters.repositories import JsonFileSessionStore
from revcard.client import BankClient, normalize_phone
from revcard.config import AppConfig, ConfigLoaderException, get_config, set_config
from revcard.core.exceptions import (
    CardNotFoundError,
    NeedsReauthenticationError,
    RevcardBaseException,
)
from revcard.infrastructure.logging import configure_logging
from revcard.ui.console import print_error, print_info, print_success, print_warning
from revcard.ui.tables import show_card_secrets, show_cards_table

PHONE_KEY = "phoneNumber"
CARD_KEY = "cardId"

# --- Configuração da Aplicação CLI ---
app = typer.Typer(
    name="revcard",
    help="Mostra os dados de um cartão virtual descartável.",
    add_completion=False,
    rich_markup_mode="rich",
)


@app.callback()
def main(
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Arquivo config.yaml a carregar."),
    ] = None,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Ativa logs de depuração."),
    ] = False,
) -> None:
    """Carrega a configuração e prepara o logging antes de qualquer comando."""
    try:
        config = get_config(reload=True, config_path=str(config_path) if config_path else None)
    except ConfigLoaderException as e:
        print_error(str(e))
        raise typer.Exit(code=2)

    config.debug = config.debug or debug
    set_config(config)

    logger = configure_logging(config.logging)
    if config.debug:
        logger.set_level("DEBUG")
    logger.debug("Configuração carregada", sessao=str(config.storage.session_file))


def _store(config: AppConfig) -> JsonFileSessionStore:
    return JsonFileSessionStore(config.storage.session_file)


@contextmanager
def _handle_errors(store: JsonFileSessionStore) -> Iterator[None]:
    """Converte exceções do Revcard em mensagens e códigos de saída."""
    try:
        yield
    except NeedsReauthenticationError as e:
        store.clear()
        print_error(f"Sessão expirada, faça login novamente: {e.message}")
        raise typer.Exit(code=1)
    except RevcardBaseException as e:
        print_error(str(e))
        raise typer.Exit(code=1)


def _signed_in_client(config: AppConfig, store: JsonFileSessionStore) -> BankClient:
    phone = store.get_value(PHONE_KEY)
    if not phone:
        print_info(f"O telefone será gravado em `{store.path}`.")
        phone = normalize_phone(typer.prompt("Phone number"))
        store.set_value(PHONE_KEY, phone)

    pin = typer.prompt("PIN", hide_input=True)

    client = BankClient(phone, pin, store, config=config)
    client.sign_in()
    return client


@app.command(help="Faz login e mostra PAN, validade e CVV do cartão descartável.")
def show(
    card_id: Annotated[
        Optional[str],
        typer.Option("--card-id", help="Cartão específico (ignora o cartão gravado)."),
    ] = None,
    reuse: Annotated[
        Optional[bool],
        typer.Option(
            "--reuse-existing/--always-create",
            help="Reutiliza um descartável existente ou emite sempre um novo.",
            show_default=False,
        ),
    ] = None,
) -> None:
    config = get_config()
    store = _store(config)
    if reuse is None:
        reuse = config.cards.reuse_existing_disposable_card

    with _handle_errors(store):
        client = _signed_in_client(config, store)

        if card_id is None and reuse:
            card_id = store.get_value(CARD_KEY)
        if card_id is None:
            card_id = client.find_or_create_disposable_card(reuse_existing=reuse)
            store.set_value(CARD_KEY, card_id)

        try:
            secrets = client.get_card_secrets(card_id)
        except CardNotFoundError:
            if store.get_value(CARD_KEY) == card_id:
                store.set_value(CARD_KEY, None)
            raise

    show_card_secrets(secrets)


@app.command(help="Lista os cartões da conta.")
def cards() -> None:
    config = get_config()
    store = _store(config)

    with _handle_errors(store):
        client = _signed_in_client(config, store)
        card_list = client.list_cards()

    if not card_list:
        print_warning("Nenhum cartão encontrado.")
        return
    show_cards_table(card_list)


@app.command(help="Exclui um cartão.")
def delete(
    card_id: Annotated[str, typer.Argument(help="ID do cartão a excluir.")],
) -> None:
    config = get_config()
    store = _store(config)

    with _handle_errors(store):
        client = _signed_in_client(config, store)
        client.delete_card(card_id)
        if store.get_value(CARD_KEY) == card_id:
            store.set_value(CARD_KEY, None)

    print_success(f"Cartão {card_id} excluído.")


@app.command(help="Apaga a sessão gravada (o telefone é mantido).")
def logout() -> None:
    config = get_config()
    store = _store(config)

    with _handle_errors(store):
        store.clear()

    print_success("Sessão removida.")


if __name__ == "__main__":
    app()
