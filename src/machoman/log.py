#
#  machoman | machoman
#  log.py
#
#  Static, leveled logger. Every message is prefixed with the module, line and caller it came from.
#
#  This file is part of machoman. machoman is free software that
#  is made available under the MIT license. Consult the
#  file "LICENSE" that is distributed together with this file
#  for the exact licensing terms.
#
#  Copyright (c) 0cyn 2022.
#

from enum import Enum
import sys
import inspect
import os


class LogLevel(Enum):
    NONE = -1
    ERROR = 0
    WARN = 1
    INFO = 2
    DEBUG = 3
    DEBUG_MORE = 4
    # one line per field read. pipe it to a file.
    DEBUG_TOO_MUCH = 5


def print_err(msg):
    print(msg, file=sys.stderr)


class log:
    """
    Static logger shared by the whole package.

    Output sinks are swappable so tests and embedding tools can capture or redirect messages.
    """

    LOG_LEVEL = LogLevel.ERROR
    # Should be a function name, without ()
    LOG_FUNC = print
    LOG_ERR = print_err

    @staticmethod
    def caller_name(frame_info: inspect.FrameInfo) -> str:
        local_vars = frame_info.frame.f_locals
        if 'self' in local_vars:
            return f'{type(local_vars["self"]).__name__}:{frame_info.function}'
        if 'cls' in local_vars:
            return f'{local_vars["cls"].__name__}:{frame_info.function}'
        return frame_info.function

    @staticmethod
    def line() -> str:
        # [0] is line(), [1] is _emit(), [2] is the level method; the caller is the one after that
        frame_info = inspect.stack()[3]
        module = os.path.basename(frame_info.filename).split('.')[0]
        return f'machoman.{module}:L#{frame_info.lineno}:{log.caller_name(frame_info)}()'

    @staticmethod
    def _emit(level: LogLevel, tag: str, sink, msg):
        if log.LOG_LEVEL.value >= level.value:
            sink(f'{tag} - {log.line()} - {msg}')

    @staticmethod
    def debug(msg=""):
        log._emit(LogLevel.DEBUG, 'DEBUG', log.LOG_FUNC, msg)

    @staticmethod
    def debug_more(msg=""):
        log._emit(LogLevel.DEBUG_MORE, 'DEBUG-2', log.LOG_FUNC, msg)

    @staticmethod
    def debug_tm(msg=""):
        log._emit(LogLevel.DEBUG_TOO_MUCH, 'DEBUG-3', log.LOG_FUNC, msg)

    @staticmethod
    def warn(msg=""):
        log._emit(LogLevel.WARN, 'WARN', log.LOG_ERR, msg)

    @staticmethod
    def error(msg=""):
        log._emit(LogLevel.ERROR, 'ERROR', log.LOG_ERR, msg)
