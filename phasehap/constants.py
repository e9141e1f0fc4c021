"""Numerical constants shared by the haplotype routines."""

BIGINT = 9999  # largest microsatellite allele
NMAXD = 4  # width used when printing identifiers
KMAX = 50  # number of alleles
ITPRINT = 10  # how often to report the iteration number

MAXLISTLENGTH = 11

EPSILON = 1e-100
EMCONVERGE = 1e-4
BIGNEGATIVE = -1.0e300
RANDMAX = 2147483647

DIRPRIOR = 1e-100  # Dirichlet prior parameter for naive Gibbs updates
RHOMULTSIGMA = 1.15  # standard deviation of the prior on log(RhoMult)
MAXRHOMEAN = 1000.0
MINRHOMEAN = 1e-8

# Representation of missing alleles
MISSNP = "?"
MISSMS = -1

# Number of ancestral haplotypes used by the ancestral-haplotype method
NANCHAP = 15

POSITIONLINEINDICATOR = "P"

SPACEHOLDER = "="  # printed in place of unambiguous sites
MISSCHAR = "?"  # printed in place of missing sites
UNKNOWNPHASECHAR = "*"

# Gauss-Laguerre quadrature used to integrate over coalescence times.
SS = 2  # number of quadrature points
NPOWER = 50  # number of powers used in the approximation
TIMES = (0.58578643, 3.41421356)
WEIGHTS = (0.85355339, 0.14644661)