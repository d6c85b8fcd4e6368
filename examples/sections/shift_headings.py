"""Shift every ATX heading one level down without touching anything else."""

from pespunte import Heading, insert_before, rewrite

source = """# Top Level

Content, with *emphasis* and   odd   spacing.

## Section

More content.
"""

deeper = insert_before("#", Heading())
print(rewrite(source, deeper))
