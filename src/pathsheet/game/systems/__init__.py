"""Rule calculators: pure derivations over a character record."""
