"""
Currency Module

Handles ISO 4217 currency codes and fixed-point money values. Amounts are
always held at the currency's minor-unit scale and are truncated toward zero
on construction. NEVER uses float for monetary values.
"""

from decimal import Decimal, ROUND_DOWN, InvalidOperation, getcontext
from dataclasses import dataclass
from typing import Union
from enum import Enum

# Set global decimal context for financial precision
getcontext().prec = 28


class InvalidCurrencyError(ValueError):
    """Raised for currency codes that are not recognised ISO 4217 codes"""


class CurrencyMismatchError(ValueError):
    """Raised when two money values in different currencies are combined"""


class InvalidAmountError(ValueError):
    """Raised when an amount cannot be represented as a finite decimal"""


class Currency(Enum):
    """Active ISO 4217 currency codes with their minor-unit precision"""
    AED = ("AED", 2)  # UAE Dirham
    AFN = ("AFN", 2)  # Afghani
    ALL = ("ALL", 2)  # Lek
    AMD = ("AMD", 2)  # Armenian Dram
    ANG = ("ANG", 2)  # Netherlands Antillean Guilder
    AOA = ("AOA", 2)  # Kwanza
    ARS = ("ARS", 2)  # Argentine Peso
    AUD = ("AUD", 2)  # Australian Dollar
    AWG = ("AWG", 2)  # Aruban Florin
    AZN = ("AZN", 2)  # Azerbaijan Manat
    BAM = ("BAM", 2)  # Convertible Mark
    BBD = ("BBD", 2)  # Barbados Dollar
    BDT = ("BDT", 2)  # Taka
    BGN = ("BGN", 2)  # Bulgarian Lev
    BHD = ("BHD", 3)  # Bahraini Dinar
    BIF = ("BIF", 0)  # Burundi Franc
    BMD = ("BMD", 2)  # Bermudian Dollar
    BND = ("BND", 2)  # Brunei Dollar
    BOB = ("BOB", 2)  # Boliviano
    BOV = ("BOV", 2)  # Mvdol
    BRL = ("BRL", 2)  # Brazilian Real
    BSD = ("BSD", 2)  # Bahamian Dollar
    BTN = ("BTN", 2)  # Ngultrum
    BWP = ("BWP", 2)  # Pula
    BYN = ("BYN", 2)  # Belarusian Ruble
    BZD = ("BZD", 2)  # Belize Dollar
    CAD = ("CAD", 2)  # Canadian Dollar
    CDF = ("CDF", 2)  # Congolese Franc
    CHE = ("CHE", 2)  # WIR Euro
    CHF = ("CHF", 2)  # Swiss Franc
    CHW = ("CHW", 2)  # WIR Franc
    CLF = ("CLF", 4)  # Unidad de Fomento
    CLP = ("CLP", 0)  # Chilean Peso
    CNY = ("CNY", 2)  # Yuan Renminbi
    COP = ("COP", 2)  # Colombian Peso
    COU = ("COU", 2)  # Unidad de Valor Real
    CRC = ("CRC", 2)  # Costa Rican Colon
    CUP = ("CUP", 2)  # Cuban Peso
    CVE = ("CVE", 2)  # Cabo Verde Escudo
    CZK = ("CZK", 2)  # Czech Koruna
    DJF = ("DJF", 0)  # Djibouti Franc
    DKK = ("DKK", 2)  # Danish Krone
    DOP = ("DOP", 2)  # Dominican Peso
    DZD = ("DZD", 2)  # Algerian Dinar
    EGP = ("EGP", 2)  # Egyptian Pound
    ERN = ("ERN", 2)  # Nakfa
    ETB = ("ETB", 2)  # Ethiopian Birr
    EUR = ("EUR", 2)  # Euro
    FJD = ("FJD", 2)  # Fiji Dollar
    FKP = ("FKP", 2)  # Falkland Islands Pound
    GBP = ("GBP", 2)  # Pound Sterling
    GEL = ("GEL", 2)  # Lari
    GHS = ("GHS", 2)  # Ghana Cedi
    GIP = ("GIP", 2)  # Gibraltar Pound
    GMD = ("GMD", 2)  # Dalasi
    GNF = ("GNF", 0)  # Guinean Franc
    GTQ = ("GTQ", 2)  # Quetzal
    GYD = ("GYD", 2)  # Guyana Dollar
    HKD = ("HKD", 2)  # Hong Kong Dollar
    HNL = ("HNL", 2)  # Lempira
    HTG = ("HTG", 2)  # Gourde
    HUF = ("HUF", 2)  # Forint
    IDR = ("IDR", 2)  # Rupiah
    ILS = ("ILS", 2)  # New Israeli Sheqel
    INR = ("INR", 2)  # Indian Rupee
    IQD = ("IQD", 3)  # Iraqi Dinar
    IRR = ("IRR", 2)  # Iranian Rial
    ISK = ("ISK", 0)  # Iceland Krona
    JMD = ("JMD", 2)  # Jamaican Dollar
    JOD = ("JOD", 3)  # Jordanian Dinar
    JPY = ("JPY", 0)  # Yen
    KES = ("KES", 2)  # Kenyan Shilling
    KGS = ("KGS", 2)  # Som
    KHR = ("KHR", 2)  # Riel
    KMF = ("KMF", 0)  # Comorian Franc
    KPW = ("KPW", 2)  # North Korean Won
    KRW = ("KRW", 0)  # Won
    KWD = ("KWD", 3)  # Kuwaiti Dinar
    KYD = ("KYD", 2)  # Cayman Islands Dollar
    KZT = ("KZT", 2)  # Tenge
    LAK = ("LAK", 2)  # Lao Kip
    LBP = ("LBP", 2)  # Lebanese Pound
    LKR = ("LKR", 2)  # Sri Lanka Rupee
    LRD = ("LRD", 2)  # Liberian Dollar
    LSL = ("LSL", 2)  # Loti
    LYD = ("LYD", 3)  # Libyan Dinar
    MAD = ("MAD", 2)  # Moroccan Dirham
    MDL = ("MDL", 2)  # Moldovan Leu
    MGA = ("MGA", 2)  # Malagasy Ariary
    MKD = ("MKD", 2)  # Denar
    MMK = ("MMK", 2)  # Kyat
    MNT = ("MNT", 2)  # Tugrik
    MOP = ("MOP", 2)  # Pataca
    MRU = ("MRU", 2)  # Ouguiya
    MUR = ("MUR", 2)  # Mauritius Rupee
    MVR = ("MVR", 2)  # Rufiyaa
    MWK = ("MWK", 2)  # Malawi Kwacha
    MXN = ("MXN", 2)  # Mexican Peso
    MXV = ("MXV", 2)  # Mexican Unidad de Inversion
    MYR = ("MYR", 2)  # Malaysian Ringgit
    MZN = ("MZN", 2)  # Mozambique Metical
    NAD = ("NAD", 2)  # Namibia Dollar
    NGN = ("NGN", 2)  # Naira
    NIO = ("NIO", 2)  # Cordoba Oro
    NOK = ("NOK", 2)  # Norwegian Krone
    NPR = ("NPR", 2)  # Nepalese Rupee
    NZD = ("NZD", 2)  # New Zealand Dollar
    OMR = ("OMR", 3)  # Rial Omani
    PAB = ("PAB", 2)  # Balboa
    PEN = ("PEN", 2)  # Sol
    PGK = ("PGK", 2)  # Kina
    PHP = ("PHP", 2)  # Philippine Peso
    PKR = ("PKR", 2)  # Pakistan Rupee
    PLN = ("PLN", 2)  # Zloty
    PYG = ("PYG", 0)  # Guarani
    QAR = ("QAR", 2)  # Qatari Rial
    RON = ("RON", 2)  # Romanian Leu
    RSD = ("RSD", 2)  # Serbian Dinar
    RUB = ("RUB", 2)  # Russian Ruble
    RWF = ("RWF", 0)  # Rwanda Franc
    SAR = ("SAR", 2)  # Saudi Riyal
    SBD = ("SBD", 2)  # Solomon Islands Dollar
    SCR = ("SCR", 2)  # Seychelles Rupee
    SDG = ("SDG", 2)  # Sudanese Pound
    SEK = ("SEK", 2)  # Swedish Krona
    SGD = ("SGD", 2)  # Singapore Dollar
    SHP = ("SHP", 2)  # Saint Helena Pound
    SLE = ("SLE", 2)  # Leone
    SOS = ("SOS", 2)  # Somali Shilling
    SRD = ("SRD", 2)  # Surinam Dollar
    SSP = ("SSP", 2)  # South Sudanese Pound
    STN = ("STN", 2)  # Dobra
    SVC = ("SVC", 2)  # El Salvador Colon
    SYP = ("SYP", 2)  # Syrian Pound
    SZL = ("SZL", 2)  # Lilangeni
    THB = ("THB", 2)  # Baht
    TJS = ("TJS", 2)  # Somoni
    TMT = ("TMT", 2)  # Turkmenistan New Manat
    TND = ("TND", 3)  # Tunisian Dinar
    TOP = ("TOP", 2)  # Pa'anga
    TRY = ("TRY", 2)  # Turkish Lira
    TTD = ("TTD", 2)  # Trinidad and Tobago Dollar
    TWD = ("TWD", 2)  # New Taiwan Dollar
    TZS = ("TZS", 2)  # Tanzanian Shilling
    UAH = ("UAH", 2)  # Hryvnia
    UGX = ("UGX", 0)  # Uganda Shilling
    USD = ("USD", 2)  # US Dollar
    USN = ("USN", 2)  # US Dollar (Next day)
    UYI = ("UYI", 0)  # Uruguay Peso en Unidades Indexadas
    UYU = ("UYU", 2)  # Peso Uruguayo
    UYW = ("UYW", 4)  # Unidad Previsional
    UZS = ("UZS", 2)  # Uzbekistan Sum
    VED = ("VED", 2)  # Bolivar Soberano
    VES = ("VES", 2)  # Bolivar Soberano
    VND = ("VND", 0)  # Dong
    VUV = ("VUV", 0)  # Vatu
    WST = ("WST", 2)  # Tala
    XAF = ("XAF", 0)  # CFA Franc BEAC
    XCD = ("XCD", 2)  # East Caribbean Dollar
    XCG = ("XCG", 2)  # Caribbean Guilder
    XOF = ("XOF", 0)  # CFA Franc BCEAO
    XPF = ("XPF", 0)  # CFP Franc
    YER = ("YER", 2)  # Yemeni Rial
    ZAR = ("ZAR", 2)  # Rand
    ZMW = ("ZMW", 2)  # Zambian Kwacha
    ZWG = ("ZWG", 2)  # Zimbabwe Gold

    def __init__(self, code: str, precision: int):
        self.code = code
        self.precision = precision

    @classmethod
    def from_code(cls, code: str) -> 'Currency':
        """
        Look up a currency by its ISO 4217 code

        Raises:
            InvalidCurrencyError: If the code is not a recognised ISO code
        """
        if isinstance(code, Currency):
            return code
        if not isinstance(code, str) or code not in cls.__members__:
            raise InvalidCurrencyError(f"Unrecognised currency code: {code!r}")
        return cls[code]

    @property
    def quantum(self) -> Decimal:
        return Decimal('0.1') ** self.precision


AmountLike = Union[Decimal, int, str, float]


def to_decimal(value: AmountLike) -> Decimal:
    """
    Convert an amount to a finite Decimal

    Floats go through str() so that 1.567 becomes Decimal('1.567') rather
    than its binary expansion.

    Raises:
        InvalidAmountError: If the value is not a finite number
    """
    if isinstance(value, bool):
        raise InvalidAmountError(f"Cannot convert {value!r} to an amount")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise InvalidAmountError(f"Cannot convert {value!r} to an amount")
    if not result.is_finite():
        raise InvalidAmountError(f"Amount must be finite, got {value!r}")
    return result


@dataclass(frozen=True)
class Money:
    """
    Immutable money representation with currency and proper precision.

    The amount is truncated toward zero to the currency's minor-unit scale,
    so 1.567 USD is stored as 1.56 and -1.567 USD as -1.56.
    """
    amount: Decimal
    currency: Currency

    def __post_init__(self):
        if not isinstance(self.currency, Currency):
            object.__setattr__(self, 'currency', Currency.from_code(self.currency))

        try:
            truncated = to_decimal(self.amount).quantize(
                self.currency.quantum,
                rounding=ROUND_DOWN
            )
        except InvalidOperation:
            # Result would need more digits than the decimal context allows
            raise InvalidAmountError(
                f"Amount {self.amount!r} exceeds {getcontext().prec} significant digits"
            )
        object.__setattr__(self, 'amount', truncated)

    @classmethod
    def of(cls, currency_code: str, amount: AmountLike) -> 'Money':
        """
        Build a money value from an ISO code and an amount

        Raises:
            InvalidCurrencyError: If the currency code is not recognised
            InvalidAmountError: If the amount is not a finite number or has too many digits
        """
        return cls(to_decimal(amount), Currency.from_code(currency_code))

    @classmethod
    def zero(cls, currency_code: str) -> 'Money':
        return cls.of(currency_code, Decimal('0'))

    @classmethod
    def from_minor_units(cls, units: int, currency: Union[Currency, str]) -> 'Money':
        """Build a money value from an integer count of minor units"""
        currency = Currency.from_code(currency)
        return cls(Decimal(int(units)).scaleb(-currency.precision), currency)

    def to_minor_units(self) -> int:
        """Amount expressed as an integer count of minor units (cents)"""
        return int(self.amount.scaleb(self.currency.precision))

    @property
    def currency_code(self) -> str:
        return self.currency.code

    def _require_same_currency(self, other: 'Money', verb: str) -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(
                f"Cannot {verb} {self.currency.code} and {other.currency.code}"
            )

    def __add__(self, other: 'Money') -> 'Money':
        self._require_same_currency(other, "add")
        return Money(self.amount + other.amount, self.currency)

    def __sub__(self, other: 'Money') -> 'Money':
        if self.currency != other.currency:
            raise CurrencyMismatchError(
                f"Cannot subtract {other.currency.code} from {self.currency.code}"
            )
        return Money(self.amount - other.amount, self.currency)

    def __neg__(self) -> 'Money':
        return Money(-self.amount, self.currency)

    def __abs__(self) -> 'Money':
        return Money(abs(self.amount), self.currency)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._require_same_currency(other, "compare")
        return self.amount == other.amount

    def __lt__(self, other: 'Money') -> bool:
        self._require_same_currency(other, "compare")
        return self.amount < other.amount

    def __le__(self, other: 'Money') -> bool:
        self._require_same_currency(other, "compare")
        return self.amount <= other.amount

    def __gt__(self, other: 'Money') -> bool:
        self._require_same_currency(other, "compare")
        return self.amount > other.amount

    def __ge__(self, other: 'Money') -> bool:
        self._require_same_currency(other, "compare")
        return self.amount >= other.amount

    def is_zero(self) -> bool:
        """Check if amount is exactly zero"""
        return self.amount == Decimal('0')

    def is_positive(self) -> bool:
        """Check if amount is positive"""
        return self.amount > Decimal('0')

    def is_negative(self) -> bool:
        """Check if amount is negative"""
        return self.amount < Decimal('0')

    def to_plain_string(self) -> str:
        """Amount without exponent notation, e.g. '90.09'"""
        return format(self.amount, 'f')

    def to_string(self) -> str:
        """Format for display"""
        if self.currency.precision == 0:
            return f"{self.currency.code} {self.amount:,.0f}"
        else:
            return f"{self.currency.code} {self.amount:,.{self.currency.precision}f}"
