#!/usr/bin/env python3
# import_jobs.py
import sys

from errors import ConfigError, My2moError, JoinRequiresTabDelimited
from import_log import ImportLog
from importer import TableImporter
from join_importer import JoinImporter
from logging_config import logger
from manifest import read_table_specs, read_join_specs
from mongoimport import MongoImport
from results import BatchReport, ImportResult


class ImportJobs:
    """
    Runs a whole import: every table in import.tables, then every join in
    import.joins, one at a time.

    A failing table or join is logged and skipped; only configuration
    problems (ConfigError) stop the run, and those are raised before
    anything is imported.

    Usage:
        report = ImportJobs(config).run()
    """

    def __init__(self, config, loader=None):
        self.config = config
        self.loader = loader

    def load_manifests(self):
        """
        Returns:
            tuple: (list[TableSpec], list[JoinSpec])
        """
        tables = read_table_specs(self.config.manifest_dir)
        joins = read_join_specs(self.config.manifest_dir)
        if joins and not self.config.tab_delimited:
            raise JoinRequiresTabDelimited(
                f"{self.config.joins_path}: joins require tab-delimited data files (-t)"
            )
        return tables, joins

    def _run_entry(self, report, log, kind, name, func):
        try:
            result = func()
        except ConfigError:
            raise
        except My2moError as err:
            result = ImportResult.failure(name, kind, err)
            logger.warning(f"...{name}, {err}")
            print(f"see {log.name} for details", file=sys.stderr)
        return report.add(result)

    def run(self):
        tables, joins = self.load_manifests()
        report = BatchReport()
        database = self.config.database

        with ImportLog(self.config.log_path) as log:
            loader = self.loader or MongoImport(self.config, log)
            table_importer = TableImporter(self.config, log, loader=loader)
            join_importer = JoinImporter(self.config, log, loader=loader)

            log.header(
                f"Results of mongoimport of {len(tables)} tables and {len(joins)} joins "
                f"into Mongo database '{database}'..."
            )
            logger.info(f"Importing {len(tables)} tables into Mongo database '{database}'...")

            for spec in tables:
                self._run_entry(report, log, "table", spec.name,
                                lambda spec=spec: table_importer.import_table(spec))

            if joins:
                logger.info(f"Importing {len(joins)} joined tables...")
            for spec in joins:
                self._run_entry(report, log, "join", spec.output_name,
                                lambda spec=spec: join_importer.import_join(spec))

        logger.info(f"Import complete! {report.summary()}")
        return report
