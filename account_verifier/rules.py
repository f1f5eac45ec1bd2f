"""
Fixed CSV import/export rules.

This file exists to keep the column contract and export layout in one place.
"""

REQUIRED_FIELDS = ("beneficiaryName", "bankName", "accountNumber", "bvn")

DELIMITER = ","
QUOTE = '"'

# Joins account number and bank name into one duplicate key; never occurs in either field.
DUPLICATE_KEY_SEPARATOR = "\x1f"

STATUS_SUCCESS = "Success"
STATUS_FAILED = "Failed"

SUCCESSFUL_EXPORT_COLUMNS = REQUIRED_FIELDS
ALL_RESULTS_EXPORT_COLUMNS = REQUIRED_FIELDS + ("status", "message")

SUCCESSFUL_EXPORT_FILENAME = "successful_verifications.csv"
ALL_RESULTS_EXPORT_FILENAME = "all_verification_results.csv"

ACCOUNT_NUMBER_DIGITS = 10  # NUBAN
BVN_DIGITS = 11

# Served when the AI bank lookup fails.
FALLBACK_BANKS = (
    ("Access Bank", "044150149"),
    ("Citibank", "023150005"),
    ("Ecobank Nigeria", "050150311"),
    ("Fidelity Bank", "070150003"),
    ("First Bank of Nigeria", "011151003"),
    ("First City Monument Bank (FCMB)", "214150018"),
    ("Guaranty Trust Holding Company (GTCO)", "058152052"),
    ("Jaiz Bank", "301080020"),
    ("Keystone Bank", "082150017"),
    ("Kuda Bank", "502110004"),
    ("Opay", "999992"),
    ("Palmpay", "999991"),
    ("Polaris Bank", "076151006"),
    ("Providus Bank", "101150013"),
    ("Stanbic IBTC Bank", "221150018"),
    ("Standard Chartered Bank", "068150015"),
    ("Sterling Bank", "232150016"),
    ("SunTrust Bank", "100150017"),
    ("TAJBank", "302080015"),
    ("Union Bank of Nigeria", "032150002"),
    ("United Bank for Africa (UBA)", "033153592"),
    ("Unity Bank", "215150015"),
    ("Wema Bank", "035150103"),
    ("Zenith Bank", "057150013"),
)
