"""
ScamShield Constants - lexicons, regexes and fixed reference values.
"""

import re
from typing import Dict, List, Pattern, Tuple

# APPLICATION INFO
APP_NAME: str = "ScamShield"
APP_DESCRIPTION: str = "Threat scoring and feedback-learning engine for SMS/chat scams"

# EXTERNAL API URLS
OPENROUTER_API_URL: str = "https://openrouter.ai/api/v1"

# MESSAGE SHAPE
SMS_SEGMENT_LENGTH: int = 160
READABILITY_WORDS_PER_SENTENCE: float = 15.0
HISTORY_WINDOW: int = 5
HISTORY_FREQUENCY_SCALE: float = 10.0
BUSINESS_HOURS: Tuple[int, int] = (9, 17)   # inclusive hours

# =============================================================================
# FEATURE LEXICONS (term -> weight)
# =============================================================================

URGENCY_TERMS: Dict[str, float] = {
    "ด่วน": 1.2,
    "รีบ": 1.0,
    "ทันที": 1.2,
    "เร่งด่วน": 1.0,
    "ก่อนสาย": 1.0,
    "หมดเขต": 1.0,
    "urgent": 1.0,
    "immediately": 1.0,
    "act now": 1.0,
}

FINANCIAL_TERMS: Dict[str, float] = {
    "บัญชี": 1.0,
    "โอนเงิน": 1.5,
    "ธนาคาร": 1.0,
    "เงินฝาก": 1.0,
    "บัตรเครดิต": 1.2,
    "ชำระเงิน": 1.0,
    "ระงับบัญชี": 1.8,
    "ยืนยันตัวตน": 1.3,
    "คลิกลิงค์": 1.1,
    "กรอกข้อมูล": 1.2,
    "bank account": 1.0,
    "credit card": 1.2,
    "account suspended": 1.8,
    "verify your account": 1.3,
}

REWARD_TERMS: Dict[str, float] = {
    "รางวัล": 1.0,
    "โชคดี": 1.0,
    "ได้รับเลือก": 1.0,
    "ผู้โชคดี": 1.0,
    "แจ็คพอต": 1.0,
    "ให้ฟรี": 1.0,
    "ฟรี": 1.0,
    "โบนัส": 1.0,
    "แตก": 1.5,
    "ถอนได้": 1.5,
    "เว็บใหม่": 1.5,
    "ค่ายใหญ่": 1.5,
    "สล็อต": 1.0,
    "คาสิโน": 1.0,
    "winner": 1.0,
    "prize": 1.0,
    "jackpot": 1.0,
    "free gift": 1.0,
}

POSITIVE_WORDS: List[str] = ["ดี", "ยินดี", "ขอบคุณ", "สำเร็จ", "ปลอดภัย", "อร่อย", "สนุก", "มีความสุข"]
NEGATIVE_WORDS: List[str] = ["เสีย", "อันตราย", "ปัญหา", "ระงับ", "หยุด"]
CASUAL_WORDS: List[str] = ["กิน", "ไป", "มา", "ไหม", "แล้ว", "จ้า", "นะ", "หรอ", "ไรดี", "ยังไง"]
FORMAL_MARKERS: List[str] = ["กรุณา", "ท่าน", "สำนักงาน", "บริษัท", "หน่วยงาน"]
POLITE_PARTICLES: List[str] = ["ครับ", "ค่ะ"]

SENTIMENT_STEP: float = 0.2
CASUAL_BONUS: float = 0.4
CASUAL_MAX_LENGTH: int = 30
FORMALITY_STEP: float = 0.2

# =============================================================================
# ENTITY AND FLAG REGEXES
# =============================================================================

URL_PATTERN: Pattern = re.compile(r"(?:https?://|www\.)[^\s]+", re.IGNORECASE)
PHONE_PATTERN: Pattern = re.compile(r"(?<!\d)(?:(?:\+66|0)[6-9]\d{8}|0[2-5]\d{7})(?!\d)")
PHONE_SEPARATOR_PATTERN: Pattern = re.compile(r"(?<=\d)[\s-](?=\d)")
EMAIL_PATTERN: Pattern = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")

ALL_CAPS_PATTERN: Pattern = re.compile(r"[A-Z]{5,}")
NUMBER_PATTERN: Pattern = re.compile(r"\d+")
TIME_LIMIT_PATTERN: Pattern = re.compile(
    r"\d+\s*(?:วัน|ชั่วโมง|นาที|เดือน)|หมดเขต|สิ้นสุด|within\s+\d+\s*(?:hours?|days?|minutes?)",
    re.IGNORECASE,
)
MONEY_PATTERN: Pattern = re.compile(
    r"\d+\s*(?:บาท|เหรียญ|THB|USD|฿)|฿\s*\d+|\d{1,3}(?:,\d{3})+",
    re.IGNORECASE,
)
SENTENCE_SPLIT_PATTERN: Pattern = re.compile(r"[.!?]")

# Co-occurring risk factors counted by the ensemble combiner
RISK_FACTOR_PATTERNS: Dict[str, Pattern] = {
    "urgency": re.compile(r"ด่วน|รีบ|ทันที|urgent|immediately", re.IGNORECASE),
    "money_request": re.compile(r"โอนเงิน|จ่ายเงิน|ชำระเงิน|transfer money|pay now", re.IGNORECASE),
    "reward": re.compile(r"รางวัล|โชคดี|ผู้โชคดี|prize|winner", re.IGNORECASE),
    "account_threat": re.compile(r"ระงับ|อายัด|หมดอายุ|suspend|expired", re.IGNORECASE),
    "link_request": re.compile(r"คลิก|กด|ลิงค์|ลิงก์|click|link", re.IGNORECASE),
}

# =============================================================================
# KEYWORD SIGNAL LEXICON (term, weight, category tag)
# =============================================================================

SUSPICIOUS_TERMS: List[Tuple[str, float, str]] = [
    ("ระงับบัญชี", 0.8, "financial_threat"),
    ("บัญชีถูกอายัด", 0.8, "financial_threat"),
    ("ยืนยันตัวตน", 0.6, "financial_threat"),
    ("account suspended", 0.8, "financial_threat"),
    ("verify your account", 0.6, "financial_threat"),
    ("โชคดี", 0.6, "lottery_scam"),
    ("รางวัล", 0.6, "lottery_scam"),
    ("ผู้โชคดี", 0.6, "lottery_scam"),
    ("แจ็คพอต", 0.6, "lottery_scam"),
    ("you have won", 0.6, "lottery_scam"),
    ("ด่วน", 0.4, "urgency"),
    ("ทันที", 0.4, "urgency"),
    ("รีบ", 0.4, "urgency"),
    ("หมดเขต", 0.4, "urgency"),
    ("urgent", 0.4, "urgency"),
    ("โอนเงิน", 0.7, "payment_request"),
    ("ชำระเงิน", 0.7, "payment_request"),
    ("จ่ายเงิน", 0.7, "payment_request"),
    ("ชำระค่าธรรมเนียม", 0.7, "payment_request"),
    ("transfer money", 0.7, "payment_request"),
    ("เครดิตฟรี", 0.6, "gambling"),
    ("สล็อต", 0.6, "gambling"),
    ("บาคาร่า", 0.6, "gambling"),
    ("แตกง่าย", 0.6, "gambling"),
    ("ถอนได้เลย", 0.6, "gambling"),
    ("ได้เงินเร็ว", 0.6, "investment_fraud"),
    ("ผลตอบแทนสูง", 0.6, "investment_fraud"),
    ("guaranteed return", 0.6, "investment_fraud"),
    ("จัดส่งไม่ได้", 0.5, "delivery_scam"),
    ("พัสดุตกค้าง", 0.5, "delivery_scam"),
    ("ปปง", 0.6, "impersonation"),
    ("คดีฟอกเงิน", 0.7, "impersonation"),
]

# Official organization names frequently quoted by legitimate senders
KNOWN_ORGANIZATION_TERMS: List[str] = [
    "ธนาคารกรุงเทพ", "ธนาคารกสิกรไทย", "ธนาคารไทยพาณิชย์",
    "บริษัท ทรู", "บริษัท ดีแทค", "บริษัท เอไอเอส",
    "การไฟฟ้านครหลวง", "การไฟฟ้าส่วนภูมิภาค",
    "สำนักงานคณะกรรมการกิจการกระจายเสียง",
    "กรมสรรพากร", "กรมการขนส่งทางบก",
]

# Routine account/billing traffic
BUSINESS_COMMUNICATION_TERMS: List[str] = [
    "แจ้งยอดคงเหลือ", "รายการใช้จ่าย", "กำหนดชำระ",
    "ใบกำกับภาษี", "ใบเสร็จรับเงิน", "การนัดหมาย",
    "รหัสยืนยัน OTP", "รหัสสำหรับการทำรายการ",
]

# =============================================================================
# LEARNING PATTERNS
# =============================================================================

LEARNING_PATTERNS: List[Pattern] = [
    re.compile(r"ระงับบัญชี"),
    re.compile(r"ยืนยันตัวตน"),
    re.compile(r"โอนเงิน.{0,20}?ด่วน"),
    re.compile(r"รางวัล.{0,20}?โชคดี"),
    re.compile(r"ชำระ.{0,20}?ค่าธรรมเนียม"),
    re.compile(r"คลิก.{0,20}?ลิงค์"),
    re.compile(r"กรอก.{0,20}?ข้อมูล"),
    re.compile(r"หมดอายุ.{0,20}?\d+.{0,10}?วัน"),
]

# pattern -> (accuracy, context)
SEED_PATTERNS: Dict[str, Tuple[float, str]] = {
    "ระงับบัญชี": (0.9, "banking"),
    "ยืนยันตัวตน": (0.85, "banking"),
    "รางวัลโชคดี": (0.8, "lottery"),
    "โอนเงินด่วน": (0.95, "financial"),
    "คลิกลิงค์": (0.75, "phishing"),
}

MESSAGE_CONTEXT_RULES: List[Tuple[str, Pattern]] = [
    ("banking", re.compile(r"ธนาคาร|บัญชี")),
    ("lottery", re.compile(r"รางวัล|โชคดี")),
    ("financial", re.compile(r"โอนเงิน|ชำระ")),
    ("phishing", re.compile(r"คลิก|ลิงค์")),
    ("urgent", re.compile(r"ด่วน|ทันที")),
]
DEFAULT_MESSAGE_CONTEXT: str = "general"

ACCURACY_WINDOW_DAYS: int = 7
