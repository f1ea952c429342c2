"""
Fixed Natural-Key Projections

The registry reads and writes exactly one denomination and one address per
enterprise. These constants name the slice of each shared table that holds them.
"""

# Denomination rows are keyed by (entitynumber, language, typeofdenomination)
DENOMINATION_LANGUAGE_FR = "2"
DENOMINATION_TYPE_MAIN = "001"

# Address rows are keyed by (entitynumber, typeofaddress)
ADDRESS_TYPE_REGISTERED_OFFICE = "REGO"

# Date format used for every date crossing the repository boundary
DATE_FORMAT_SQL = "YYYY-MM-DD"
