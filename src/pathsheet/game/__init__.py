"""Rules-derivation engine: character records, rule tables, and calculators."""
