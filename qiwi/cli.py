from __future__ import annotations

import itertools
import logging
import sys
import uuid
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from pathlib import Path

import typer

from qiwi.client import QiwiClient
from qiwi.common.sanitize import maskSecret
from qiwi.config import Settings, defaultConfigPath, loadSettings, saveCredentials
from qiwi.domain.credentials import QiwiUser
from qiwi.domain.exceptions import ConfigError, QiwiError, TransportError
from qiwi.domain.requests import RUB, CellularTransfer, QiwiWalletTransfer, validateAmount
from qiwi.infra.logging.setup import CommandLog, StderrToLog, mapLogLevel, openCommandLog

app = typer.Typer(no_args_is_help=True, add_completion=False)

def newRunId() -> str:
    """UTC-время запуска + случайный суффикс: файлы логов сортируются по времени."""
    return f"{datetime.now(timezone.utc):%Y%m%dT%H%M%SZ}-{uuid.uuid4().hex[:8]}"


def printRunHeader(runId: str, command: str, settings: Settings, sources: list[str]) -> None:
    """
    Назначение:
        Печатает безопасную сводку параметров запуска (без токена) в stderr,
        чтобы stdout оставался пригодным для разбора.
    """
    typer.echo(
        f"run_id={runId} command={command} "
        f"phone={settings.phone} token={maskSecret(settings.token)} "
        f"base_url={settings.base_url} sources={sources} log_level={settings.log_level}",
        err=True,
    )

def parseAmount(value: str) -> Decimal:
    """
    Назначение:
        Разбор суммы из аргумента CLI.
    Ошибки:
        ValueError, если сумма не число, не положительна или точнее копеек.
    """
    try:
        amount = Decimal(value.replace(",", "."))
    except InvalidOperation as exc:
        raise ValueError(f"Invalid amount: {value}") from exc
    return validateAmount(amount)

def runCommand(ctx: typer.Context, commandName: str, requiresCredentials: bool, runner) -> None:
    """
    Назначение:
        Унифицированная обвязка выполнения команд:
        - открывает файл лога команды (туда же пишут qiwi.transport и qiwi.history)
        - дублирует stderr в лог; stdout остаётся чистым JSON-выводом
        - создаёт QiwiClient, если команде нужен доступ к API
        - переводит ошибки клиента в сообщение и exit code

    Поведение:
        - Нет учётных данных / неверный ввод / неверные настройки TLS -> exit code 2.
        - QiwiError (сервер отклонил операцию) -> exit code 2, печатается errorCode.
        - TransportError (сеть, разбор, HTTP) -> exit code 2.
    """
    runId = ctx.obj["runId"]
    settings: Settings = ctx.obj["settings"]
    sources = ctx.obj["sources"]

    log = openCommandLog(
        commandName=commandName,
        logDir=settings.log_dir,
        runId=runId,
        logLevel=settings.log_level,
    )

    originalStderr = sys.stderr
    sys.stderr = StderrToLog(originalStderr, log.logger)

    exitCode: int | None = None

    try:
        log.event(logging.INFO, "core", "Command started")
        printRunHeader(runId, commandName, settings, sources)

        client: QiwiClient | None = None
        if requiresCredentials:
            try:
                client = QiwiClient.from_settings(settings)
            except ConfigError as exc:
                log.event(logging.ERROR, "config", f"Client not configured: {exc}")
                typer.echo(f"ERROR: {exc}", err=True)
                exitCode = 2
                return

        try:
            exitCode = runner(log, client)
        except QiwiError as exc:
            log.event(logging.ERROR, "api", f"QIWI rejected operation: {exc.description}")
            typer.echo(f"ERROR: {exc.description}", err=True)
            exitCode = 2
        except TransportError as exc:
            log.event(logging.ERROR, "transport", f"Transport failure: {exc.to_dict()}")
            typer.echo(f"ERROR: {exc}", err=True)
            exitCode = 2
        except ValueError as exc:
            typer.echo(f"ERROR: {exc}", err=True)
            exitCode = 2
        finally:
            if client is not None:
                client.close()

    finally:
        log.event(logging.INFO, "core", f"Command finished exit_code={exitCode or 0}")

        sys.stderr.flush()
        sys.stderr = originalStderr
        log.close()

        if exitCode:
            raise typer.Exit(code=exitCode)


@app.callback()
def main(
    ctx: typer.Context,
    config: str | None = typer.Option(None, "--config", help="Path to config.yml (default: $XDG_CONFIG_HOME/qiwi-cli/config.yml)"),
    runId: str | None = typer.Option(None, "--run-id", help="Run identifier (used in the log file name). If omitted, generated."),
    logLevel: str | None = typer.Option(None, "--log-level", help="Log level: ERROR|WARN|INFO|DEBUG|TRACE"),
    logDir: str | None = typer.Option(None, "--log-dir", help="Directory for logs."),
    phone: str | None = typer.Option(None, "--phone", help="Wallet phone number"),
    token: str | None = typer.Option(None, "--token", help="API token (avoid; use env/file)"),
    tokenFile: str | None = typer.Option(None, "--token-file", help="Read API token from file"),
    baseUrl: str | None = typer.Option(None, "--base-url", help="API base address"),
    timeoutSeconds: float | None = typer.Option(None, "--timeout-seconds", help="API timeout in seconds"),
    tlsSkipVerify: bool | None = typer.Option(None, "--tls-skip-verify", help="Disable TLS verification"),
    caFile: str | None = typer.Option(None, "--ca-file", help="CA file path"),
):
    """
    Назначение:
        Глобальная инициализация CLI:
        - генерирует/принимает run_id
        - загружает настройки (CLI > ENV > config > defaults)
        - сохраняет всё в ctx.obj для подкоманд
    """
    if tokenFile and not token:
        p = Path(tokenFile)
        if not p.exists() or not p.is_file():
            typer.echo(f"ERROR: token-file not found: {tokenFile}", err=True)
            raise typer.Exit(code=2)
        token = p.read_text(encoding="utf-8").strip()

    if not runId:
        runId = newRunId()

    cliOverrides = {
        "phone": phone,
        "token": token,
        "base_url": baseUrl,
        "timeout_seconds": timeoutSeconds,
        "tls_skip_verify": tlsSkipVerify,
        "ca_file": caFile,
        "log_dir": logDir,
        "log_level": logLevel,
    }
    try:
        loaded = loadSettings(config_path=config, cli_overrides=cliOverrides)
        mapLogLevel(loaded.settings.log_level)
    except ValueError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=2)

    ctx.obj = {
        "runId": runId,
        "settings": loaded.settings,
        "sources": loaded.sources_used,
        "configPath": config,
    }

@app.command()
def login(ctx: typer.Context):
    """Authorize client: store phone and token in the config file."""

    def execute(log: CommandLog, _client) -> int:
        rawPhone = typer.prompt("Please enter user ID (phone number)")
        user = QiwiUser.parse(rawPhone)
        token = typer.prompt("Please enter your token", hide_input=True).strip()
        if not token:
            typer.echo("ERROR: token must not be empty", err=True)
            return 2
        path = Path(ctx.obj["configPath"]) if ctx.obj["configPath"] else defaultConfigPath()
        typer.echo(f"Saving token on disk to {path}")
        saveCredentials(path, user.e164, token)
        log.event(logging.INFO, "config", f"Credentials saved for {user.e164}")
        return 0

    runCommand(ctx, "login", requiresCredentials=False, runner=_withPhoneErrors(execute))

@app.command("profile-info")
def profileInfo(ctx: typer.Context):
    """Get profile info."""

    def execute(_log, client: QiwiClient) -> int:
        profile = client.profile_info()
        typer.echo(profile.model_dump_json(by_alias=True, indent=2))
        return 0

    runCommand(ctx, "profile-info", requiresCredentials=True, runner=execute)

@app.command("payment-history")
def paymentHistory(
    ctx: typer.Context,
    limit: int | None = typer.Option(None, "--limit", min=1, help="Stop after N entries"),
):
    """Get payment history (one JSON document per line)."""

    def execute(log: CommandLog, client: QiwiClient) -> int:
        stream = client.payment_history()
        count = 0
        for entry in itertools.islice(stream, limit):
            typer.echo(entry.model_dump_json(by_alias=True, exclude_none=True))
            count += 1
        log.event(logging.INFO, "history", f"entries={count} pages={stream.pages_fetched}")
        return 0

    runCommand(ctx, "payment-history", requiresCredentials=True, runner=execute)

@app.command("commission-info")
def commissionInfo(ctx: typer.Context, provider: int = typer.Argument(..., help="Provider ID")):
    """Get commission ranges for a provider."""

    def execute(_log, client: QiwiClient) -> int:
        info = client.commission_info(provider)
        typer.echo(info.model_dump_json(by_alias=True, indent=2))
        return 0

    runCommand(ctx, "commission-info", requiresCredentials=True, runner=execute)

@app.command("commission-quote")
def commissionQuote(
    ctx: typer.Context,
    provider: int = typer.Argument(..., help="Provider ID"),
    account: str = typer.Argument(..., help="Recipient phone number"),
    amount: str = typer.Argument(..., help="Amount in RUB"),
):
    """Calculate QIWI commission for a payment."""

    def execute(_log, client: QiwiClient) -> int:
        quote = client.commission_quote(provider, QiwiUser.parse(account), parseAmount(amount))
        typer.echo(str(quote))
        return 0

    runCommand(ctx, "commission-quote", requiresCredentials=True, runner=_withPhoneErrors(execute))

@app.command()
def transfer(
    ctx: typer.Context,
    toPhone: str = typer.Option(..., "--to-phone", help="Recipient phone number"),
    amount: str = typer.Option(..., "--amount", help="Amount to transfer"),
    carrier: int | None = typer.Option(None, "--carrier", help="Cellular provider ID (mobile top-up instead of wallet transfer)"),
    currency: int = typer.Option(RUB, "--currency", help="Wallet transfer currency (ISO 4217 numeric)"),
    comment: str = typer.Option("", "--comment", help="Payment comment"),
    txnId: int | None = typer.Option(None, "--id", help="Client transaction ID (default: unix time * 1000)"),
):
    """Transfer money to a QIWI wallet or top up a mobile phone."""

    def execute(_log, client: QiwiClient) -> int:
        recipient = QiwiUser.parse(toPhone)
        if carrier is not None:
            direction = CellularTransfer(carrier=carrier, to_phone=recipient)
        else:
            direction = QiwiWalletTransfer(to_phone=recipient, to_currency=currency)
        result = client.transfer(parseAmount(amount), direction, comment=comment, txnId=txnId)
        typer.echo(result.model_dump_json(by_alias=True, indent=2))
        return 0

    runCommand(ctx, "transfer", requiresCredentials=True, runner=_withPhoneErrors(execute))

def _withPhoneErrors(runner):
    """Переводит ошибку разбора телефона в exit code 2 с сообщением."""

    def wrapped(log, client) -> int:
        try:
            return runner(log, client)
        except ConfigError as exc:
            typer.echo(f"ERROR: {exc}", err=True)
            return 2

    return wrapped
