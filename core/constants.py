"""
Constants and configuration values for label restructuring.
"""
import re

# Separator between a label name and its instance marker ("logic__17")
MARKER_SEPARATOR = '__'

# Marker suffix as it appears at the end of a rendered label
MARKER_PATTERN = re.compile(re.escape(MARKER_SEPARATOR) + r'([0-9]+)$')

# Upper bound for recursive re-nesting of overlapping label sets
DEFAULT_MAX_NESTING_DEPTH = 200

# Hard ceiling for the re-nesting bound, two interpreter frames per level
MAX_NESTING_DEPTH_LIMIT = 400

# Attribute keys introduced by markup serializers rather than by authors
NAMESPACE_ATTRIBUTE_PREFIXES = ('xmlns',)

# HTML adapter defaults
DEFAULT_BLOCK_SELECTOR = 'p'
DEFAULT_BLOCK_TAG = 'p'
LABEL_TAG = 'span'
LABEL_ATTRIBUTE = 'class'
COMMENT_TAG = '#comment'

# Transform modes understood by the document adapter and CLI
TRANSFORM_MODES = ('flatten', 'nest', 'roundtrip')
