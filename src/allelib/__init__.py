"""
Genomic interval and allele algebra: loci, symbol sequences, alleles and the recombination, clipping and indel
normalization operations defined over them.
"""


# Exceptions and Warnings ----------------------------------------------------------------------------------------------
class AllelibWarning(Warning): pass
