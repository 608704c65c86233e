"""Core value types: alphabets, symbol sequences, loci and indel normalization."""
