from core.catalog.models import Catalog, Document, IndexEntry, RuleDirective, normalize_tag
from core.catalog.markdown import parse_document
