#!/usr/bin/env python3
# mongoimport.py
import shlex
import subprocess

from config import TSV
from errors import ImportFailed
from logging_config import logger


class MongoImport:
    """
    Runs the mongoimport bulk loader for one collection at a time.

    Every load drops the target collection first (--drop), so re-running an
    import replaces the collection instead of appending to it. Loader output
    goes to the import log.

    Usage:
        loader = MongoImport(config, log)
        status = loader.load_file("users", ["id", "name"], "csv", "/data/users.csv", block)
    """

    def __init__(self, config, log):
        self.config = config
        self.log = log

    def build_command(self, collection, fields, filetype, path=None):
        cmd = [self.config.mongoimport_bin]
        if self.config.mongo_uri:
            cmd += ["--uri", self.config.mongo_uri]
        cmd += ["--db", self.config.database, "--type", filetype, "--drop", "-c", collection]
        if path is not None:
            cmd += ["--file", path]
        cmd += ["--fields", ",".join(fields)]
        cmd += list(self.config.import_args)
        return cmd

    def _dry_run(self, cmd, block):
        command = shlex.join(cmd)
        print(command)
        block.write("command", command)
        return 0

    def load_file(self, collection, fields, filetype, path, block):
        """
        Returns:
            int: mongoimport exit status (0 in dry-run mode).
        """
        cmd = self.build_command(collection, fields, filetype, path)
        if self.config.dry_run:
            return self._dry_run(cmd, block)

        logger.debug(f"Running: {shlex.join(cmd)}")
        try:
            completed = subprocess.run(cmd, stdout=self.log.stream, stderr=subprocess.STDOUT, check=False)
        except OSError as e:
            raise ImportFailed(f"could not run {cmd[0]}: {e}", entry=collection)
        return completed.returncode

    def load_stream(self, collection, fields, lines, block):
        """
        Feeds already-delimited lines to mongoimport's stdin (type tsv).

        Returns:
            tuple: (exit status, number of lines written)
        """
        cmd = self.build_command(collection, fields, TSV)
        if self.config.dry_run:
            count = sum(1 for _ in lines)
            return self._dry_run(cmd, block), count

        logger.debug(f"Streaming into: {shlex.join(cmd)}")
        try:
            proc = subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE,
                stdout=self.log.stream,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="surrogateescape",
            )
        except OSError as e:
            raise ImportFailed(f"could not run {cmd[0]}: {e}", entry=collection)

        count = 0
        try:
            for line in lines:
                proc.stdin.write(line)
                count += 1
            proc.stdin.close()
        except BrokenPipeError:
            try:
                proc.stdin.close()
            except BrokenPipeError:
                pass
            status = proc.wait()
            raise ImportFailed(
                f"{cmd[0]} stopped reading after {count} records (exit status {status})",
                entry=collection,
                exit_status=status,
            )
        except BaseException:
            proc.kill()
            proc.wait()
            raise
        return proc.wait(), count
