# lrid/engine/__init__.py
from .instrument import Instrument, InstrumentConfigError, load_instrument, load_instrument_file
from .responses import ResponseSet
from .draft import Draft, build_draft
from .approval import Approval, ApprovalError, build_report_payload
from .precedence import resolve_value
