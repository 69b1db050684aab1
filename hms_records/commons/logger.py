import sys
from datetime import datetime
from pathlib import Path

from loguru import logger

LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"
)


def setup_logging(root: str, level: str = "INFO", console: bool = True):
    """Sinks de archivo diario (<root>/YYYY/MM/DD/app.log) + consola.

    La capa de canonicalización solo emite registros; configurar los sinks
    es tarea del proceso que la usa (CLI, servicio, tests).
    """
    logdir = Path(root) / datetime.now().strftime("%Y/%m/%d")
    logdir.mkdir(parents=True, exist_ok=True)
    logger.remove()
    logger.add(
        str(logdir / "app.log"),
        format=LOG_FORMAT,
        rotation="00:00",
        retention="14 days",
        level=level.upper(),
        enqueue=True,
        backtrace=True,
        # los registros crudos pueden traer datos de pacientes
        diagnose=False,
    )
    if console:
        # stderr para no ensuciar el JSON que imprime la CLI por stdout
        logger.add(sys.stderr, format=LOG_FORMAT, level=level.upper())
    return logger
