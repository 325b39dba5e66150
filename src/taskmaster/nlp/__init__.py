"""Natural-language date extraction for the title field."""
