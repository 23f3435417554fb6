"""AWS service clients used by the remote stores and stack output lookups."""
