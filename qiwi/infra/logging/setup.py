from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

PACKAGE_LOGGER = "qiwi"

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_LEVELS = {
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
    "TRACE": TRACE,
}


def mapLogLevel(levelName: str) -> int:
    """
    Назначение:
        Строковый уровень из настроек -> уровень logging.

    Входные данные:
        levelName: str
            ERROR|WARN|INFO|DEBUG|TRACE. DEBUG пишет запросы и статусы ответов,
            TRACE дополнительно пишет превью тел ответов API.
    """
    value = (levelName or "").strip().upper()
    if value not in _LEVELS:
        raise ValueError(f"Unsupported log level: {levelName}")
    return _LEVELS[value]


class RunContextFilter(logging.Filter):
    """
    Назначение:
        Проставляет runId во все записи файла лога, в том числе из qiwi.transport
        и qiwi.history. Если component не передан через extra, он берётся из
        последнего сегмента имени логгера.
    """

    def __init__(self, runId: str):
        super().__init__()
        self.runId = runId

    def filter(self, record: logging.LogRecord) -> bool:
        record.runId = self.runId
        if not hasattr(record, "component"):
            record.component = record.name.rsplit(".", 1)[-1]
        return True


class StderrToLog:
    """
    Назначение:
        Подмена sys.stderr на время команды: текст уходит в исходный поток
        и построчно в лог (component=stderr).
    Ограничения:
        stdout не перехватывается: там только JSON-результат команды.
    """

    def __init__(self, stream, logger: logging.Logger):
        self.stream = stream
        self.logger = logger
        self._pending = ""

    def write(self, s: str) -> int:
        written = self.stream.write(s)
        self._pending += s
        *lines, self._pending = self._pending.split("\n")
        for line in lines:
            if line.strip():
                self.logger.info(line.rstrip(), extra={"component": "stderr"})
        return written

    def flush(self) -> None:
        self.stream.flush()
        if self._pending.strip():
            self.logger.info(self._pending.rstrip(), extra={"component": "stderr"})
        self._pending = ""


@dataclass
class CommandLog:
    """
    Назначение/ответственность:
        Файл лога одной команды CLI: {logDir}/{command}_{runId}.log.
    Инварианты/гарантии:
        - Хендлер висит на логгере пакета "qiwi", поэтому в файл попадают
          и события команды (qiwi.cli), и записи библиотеки (qiwi.transport, qiwi.history).
        - close() снимает хендлер и возвращает прежний уровень логгера пакета.
    """

    logger: logging.Logger
    path: Path
    handler: logging.Handler
    previousLevel: int

    def event(self, level: int, component: str, message: str) -> None:
        self.logger.log(level, message, extra={"component": component})

    def close(self) -> None:
        packageLogger = logging.getLogger(PACKAGE_LOGGER)
        packageLogger.removeHandler(self.handler)
        packageLogger.setLevel(self.previousLevel)
        self.handler.close()


def openCommandLog(commandName: str, logDir: str, runId: str, logLevel: str) -> CommandLog:
    level = mapLogLevel(logLevel)
    path = Path(logDir) / f"{commandName}_{runId}.log"
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)s runId=%(runId)s comp=%(component)s msg=%(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S%z",
        )
    )
    handler.addFilter(RunContextFilter(runId))

    packageLogger = logging.getLogger(PACKAGE_LOGGER)
    previousLevel = packageLogger.level
    packageLogger.setLevel(level)
    packageLogger.addHandler(handler)

    return CommandLog(
        logger=logging.getLogger(f"{PACKAGE_LOGGER}.cli"),
        path=path,
        handler=handler,
        previousLevel=previousLevel,
    )


__all__ = [
    "TRACE",
    "mapLogLevel",
    "RunContextFilter",
    "StderrToLog",
    "CommandLog",
    "openCommandLog",
]
