"""
File Backend for Persistent Logging

Buffered file logging with async I/O (aiofiles), size based rotation and
text or JSON line formats. Audit records land here too.
"""

import asyncio
import time
from datetime import datetime
from pathlib import Path
from typing import List

import aiofiles
import aiofiles.os
import msgspec

from ..interfaces import CORRELATION_FIELDS, LogBackend, LogRecord, LogLevel, LogType
from ..structs import FileBackendConfig


class FileBackend(LogBackend):
    """
    File logging backend.

    Records are buffered and written with aiofiles; errors flush immediately.
    Accepts only FileBackendConfig struct for configuration.
    """

    def __init__(self, config: FileBackendConfig, name: str = "file"):
        if not isinstance(config, FileBackendConfig):
            raise TypeError(f"Expected FileBackendConfig, got {type(config)}")
        super().__init__(name, LogLevel[config.min_level.upper()])

        self.enabled = config.enabled
        self.file_path = Path(config.path)
        self.format_type = config.format
        self.max_file_size = config.max_size_mb * 1024 * 1024
        self.backup_count = config.backup_count
        self.flush_interval = config.flush_interval
        self.include_types = {LogType.TEXT, LogType.METRIC}
        if config.include_audit:
            self.include_types.add(LogType.AUDIT)

        self._write_buffer: List[str] = []
        self._last_flush = time.time()
        self._lock = asyncio.Lock()

        if self.enabled:
            self.file_path.parent.mkdir(parents=True, exist_ok=True)

    def should_handle(self, record: LogRecord) -> bool:
        if not self.enabled:
            return False
        if record.level < self.min_level:
            return False
        return record.log_type in self.include_types

    async def write(self, record: LogRecord) -> None:
        try:
            if self.format_type == 'json':
                formatted = self._format_json(record)
            else:
                formatted = self._format_text(record)

            async with self._lock:
                self._write_buffer.append(formatted)
                should_flush = (
                    len(self._write_buffer) >= 50
                    or time.time() - self._last_flush > self.flush_interval
                    or record.level >= LogLevel.ERROR
                )
                if should_flush:
                    await self._flush_buffer()
        except Exception as e:
            self._handle_error(e)

    async def flush(self) -> None:
        async with self._lock:
            await self._flush_buffer()

    async def _flush_buffer(self) -> None:
        if not self._write_buffer:
            return
        try:
            await self._check_rotation()
            async with aiofiles.open(self.file_path, 'a') as f:
                await f.write('\n'.join(self._write_buffer) + '\n')
        except OSError as e:
            self._handle_error(e)
        finally:
            self._write_buffer.clear()
            self._last_flush = time.time()

    async def _check_rotation(self) -> None:
        if not await aiofiles.os.path.exists(self.file_path):
            return
        stat = await aiofiles.os.stat(self.file_path)
        if stat.st_size > self.max_file_size:
            await self._rotate_file()

    async def _rotate_file(self) -> None:
        """Shift log.N -> log.N+1 and move the live file to log.1."""
        for i in range(self.backup_count - 1, 0, -1):
            old_backup = self.file_path.with_suffix(f'.{i}{self.file_path.suffix}')
            new_backup = self.file_path.with_suffix(f'.{i + 1}{self.file_path.suffix}')
            if await aiofiles.os.path.exists(old_backup):
                if await aiofiles.os.path.exists(new_backup):
                    await aiofiles.os.remove(new_backup)
                await aiofiles.os.rename(old_backup, new_backup)

        if self.backup_count > 0:
            backup_path = self.file_path.with_suffix(f'.1{self.file_path.suffix}')
            await aiofiles.os.rename(self.file_path, backup_path)
        else:
            await aiofiles.os.remove(self.file_path)

    def _format_text(self, record: LogRecord) -> str:
        dt = datetime.fromtimestamp(record.timestamp)
        timestamp_str = dt.strftime('%Y-%m-%d %H:%M:%S.%f')[:-3]

        if record.log_type == LogType.METRIC:
            body = f"{record.metric_name}={record.metric_value}"
            if record.metric_tags:
                body += " " + " ".join(f"{k}={v}" for k, v in record.metric_tags.items())
        else:
            body = record.message

        message = f"{timestamp_str} {record.level.name.ljust(8)} {record.logger_name}: {body}"

        if record.context:
            parts = []
            for key, value in record.context.items():
                value_str = str(value)
                if len(value_str) > 200:
                    value_str = value_str[:200] + "..."
                parts.append(f"{key}={value_str}")
            message += f" | {', '.join(parts)}"

        for attr in CORRELATION_FIELDS:
            value = getattr(record, attr)
            if value:
                message += f" | {attr}={value}"

        if record.log_type != LogType.TEXT:
            message += f" | type={record.log_type.name}"
        return message

    def _format_json(self, record: LogRecord) -> str:
        data = {
            'timestamp': record.timestamp,
            'iso_timestamp': datetime.fromtimestamp(record.timestamp).isoformat(),
            'level': record.level.name,
            'type': record.log_type.name,
            'logger': record.logger_name,
            'message': record.message,
        }
        if record.context:
            data['context'] = record.context
        for attr in CORRELATION_FIELDS:
            value = getattr(record, attr)
            if value:
                data[attr] = value
        if record.log_type == LogType.METRIC and record.metric_name:
            data['metric'] = {
                'name': record.metric_name,
                'value': record.metric_value,
                'tags': record.metric_tags,
            }
        # str() fallback for context values msgspec cannot encode
        return msgspec.json.encode(data, enc_hook=str).decode('utf-8')
