"""Export module: HTML, CSV and Anki writers."""

from .service import ExportService, WRITERS
from .anki_export import build_deck, create_model
from .csv_export import records_to_dataframe

__all__ = ['ExportService', 'WRITERS', 'build_deck', 'create_model', 'records_to_dataframe']
