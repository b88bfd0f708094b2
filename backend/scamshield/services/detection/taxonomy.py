"""
ScamShield Threat Taxonomy

Enum-keyed lookup table of threat categories, the ordered keyword sets used
for category inference, and the seed IOC list.
"""

from typing import Dict, List, Tuple

from scamshield.models import IOC, IOCType, Severity, ThreatCategory, ThreatCategoryKey


THREAT_CATEGORIES: Dict[ThreatCategoryKey, ThreatCategory] = {
    ThreatCategoryKey.FINANCIAL_FRAUD: ThreatCategory(
        key=ThreatCategoryKey.FINANCIAL_FRAUD,
        id=1,
        name="Financial/Banking Fraud",
        name_th="การฉ้อโกงทางการเงิน/ธนาคาร",
        description="การแอบอ้างเป็นธนาคารหรือสถาบันการเงินเพื่อขโมยข้อมูลหรือเงิน",
        severity=Severity.CRITICAL,
        recommendation="ห้ามโอนเงินหรือให้ข้อมูลบัญชี ติดต่อธนาคารผ่านเบอร์ทางการที่หลังบัตรเท่านั้น",
        educational_tips=[
            "ธนาคารจริงไม่เคยขอรหัสผ่านผ่าน SMS หรือ LINE",
            "ตรวจสอบเลขบัญชีผ่านแอปธนาคารหรือโทรสายด่วน",
            "ห้ามกรอกรหัสผ่านธนาคารในเว็บไซต์ที่ไม่แน่ใจ",
        ],
    ),
    ThreatCategoryKey.ROMANCE_SCAM: ThreatCategory(
        key=ThreatCategoryKey.ROMANCE_SCAM,
        id=2,
        name="Romance/Relationship Scam",
        name_th="การหลอกลวงแบบหลอกรัก",
        description="การสร้างความสัมพันธ์หลอกเพื่อขอเงินหรือข้อมูลส่วนตัว",
        severity=Severity.HIGH,
        recommendation="อย่าส่งเงินหรือรูปส่วนตัวให้คนที่รู้จักทางออนไลน์เท่านั้น",
        educational_tips=[
            "คนแปลกหน้าที่แสดงความรักเร็วเกินไปมักมีเจตนาไม่ดี",
            "อย่าส่งเงินให้คนที่ไม่เคยพบหน้า",
            "ระวังคนที่ขอเงินเพื่อ 'เหตุฉุกเฉิน' หรือ 'ค่าเดินทาง'",
        ],
    ),
    ThreatCategoryKey.INVESTMENT_SCAM: ThreatCategory(
        key=ThreatCategoryKey.INVESTMENT_SCAM,
        id=3,
        name="Investment/Trading Fraud",
        name_th="การหลอกลงทุน/เทรดดิ้ง",
        description="การชักชวนลงทุนในผลิตภัณฑ์หรือแพลตฟอร์มปลอม",
        severity=Severity.HIGH,
        recommendation="ตรวจสอบใบอนุญาตกับ ก.ล.ต. ก่อนลงทุนทุกครั้ง",
        educational_tips=[
            "การลงทุนที่รับประกันผลตอบแทนสูงแน่นอนมักเป็นการหลอกลวง",
            "ตรวจสอบใบอนุญาตของบริษัทลงทุนกับ ก.ล.ต.",
            "อย่าลงทุนเงินที่คุณไม่สามารถเสียได้",
        ],
    ),
    ThreatCategoryKey.GAMBLING: ThreatCategory(
        key=ThreatCategoryKey.GAMBLING,
        id=4,
        name="Online Gambling/Casino",
        name_th="การพนันออนไลน์",
        description="เว็บไซต์การพนันที่ผิดกฎหมายในประเทศไทย",
        severity=Severity.MEDIUM,
        recommendation="หลีกเลี่ยงเว็บพนันออนไลน์และอย่าสมัครรับเครดิตฟรี",
        educational_tips=[
            "การพนันออนไลน์ผิดกฎหมายในประเทศไทย",
            "เว็บพนันมักจะโกงเงินเดิมพันของผู้เล่น",
            "ระวังการให้เครดิตฟรีเพื่อล่อใจ",
        ],
    ),
    ThreatCategoryKey.ECOMMERCE_FRAUD: ThreatCategory(
        key=ThreatCategoryKey.ECOMMERCE_FRAUD,
        id=5,
        name="E-commerce/Shopping Fraud",
        name_th="การฉ้อโกงการซื้อขายออนไลน์",
        description="ร้านค้าออนไลน์ปลอมหรือสินค้าไม่ตรงตามคำโฆษณา",
        severity=Severity.MEDIUM,
        recommendation="ซื้อสินค้าผ่านแพลตฟอร์มที่มีระบบคุ้มครองผู้ซื้อ",
        educational_tips=[
            "ตรวจสอบรีวิวและประวัติของร้านค้าก่อนซื้อ",
            "ใช้ระบบชำระเงินที่มีการคุ้มครองผู้ซื้อ",
            "ระวังสินค้าราคาถูกผิดปกติ",
        ],
    ),
    ThreatCategoryKey.FAKE_DELIVERY: ThreatCategory(
        key=ThreatCategoryKey.FAKE_DELIVERY,
        id=6,
        name="Fake Delivery/Shipping",
        name_th="การแจ้งจัดส่งสินค้าปลอม",
        description="การแอบอ้างเป็นบริษัทขนส่งเพื่อขอข้อมูลหรือเงิน",
        severity=Severity.MEDIUM,
        recommendation="ตรวจสอบสถานะพัสดุจากแอปหรือเว็บไซต์ของบริษัทขนส่งโดยตรง",
        educational_tips=[
            "บริษัทขนส่งจริงไม่เรียกเก็บค่าธรรมเนียมเพิ่มผ่าน SMS",
            "ตรวจสอบสถานะพัสดุผ่านเว็บไซต์หรือแอปอย่างเป็นทางการ",
            "ระวังลิงก์ในข้อความ SMS ที่อ้างว่าเป็นบริษัทขนส่ง",
        ],
    ),
    ThreatCategoryKey.GOVERNMENT_IMPERSONATION: ThreatCategory(
        key=ThreatCategoryKey.GOVERNMENT_IMPERSONATION,
        id=7,
        name="Government Impersonation",
        name_th="การแอบอ้างหน่วยงานราชการ",
        description="การแอบอ้างเป็นเจ้าหน้าที่รัฐเพื่อขู่เข็ญหรือขอข้อมูล",
        severity=Severity.HIGH,
        recommendation="วางสายแล้วโทรกลับหน่วยงานผ่านเบอร์ทางการด้วยตัวเอง",
        educational_tips=[
            "หน่วยงานราชการไม่ติดต่อขอข้อมูลผ่าน LINE หรือ SMS",
            "ตำรวจหรือเจ้าหน้าที่จริงจะแจ้งผ่านหนังสือราชการ",
            "โทรสอบถามหน่วยงานโดยตรงเมื่อมีข้อสงสัย",
        ],
    ),
    ThreatCategoryKey.CRYPTO_SCAM: ThreatCategory(
        key=ThreatCategoryKey.CRYPTO_SCAM,
        id=8,
        name="Crypto/Digital Asset Fraud",
        name_th="การหลอกลวงเกี่ยวกับสกุลเงินดิจิทัล",
        description="การหลอกลงทุนในเหรียญคริปโตหรือแพลตฟอร์มแลกเปลี่ยนปลอม",
        severity=Severity.HIGH,
        recommendation="ใช้เฉพาะแพลตฟอร์มคริปโตที่ได้รับอนุญาตจาก ก.ล.ต.",
        educational_tips=[
            "ตรวจสอบใบอนุญาตของแพลตฟอร์มคริปโตกับ ก.ล.ต.",
            "ระวังการเสนอผลตอบแทนสูงจากเหรียญคริปโตใหม่",
            "อย่าส่ง Private Key หรือ Seed Phrase ให้ใคร",
        ],
    ),
    ThreatCategoryKey.SOCIAL_ENGINEERING: ThreatCategory(
        key=ThreatCategoryKey.SOCIAL_ENGINEERING,
        id=9,
        name="Social Engineering/Phishing",
        name_th="การหลอกล่อทางจิตวิทยา",
        description="การใช้เทคนิคทางจิตวิทยาเพื่อหลอกให้เผยข้อมูลสำคัญ",
        severity=Severity.HIGH,
        recommendation="ตั้งสติ อย่าตัดสินใจภายใต้ความกดดันหรือความเร่งรีบ",
        educational_tips=[
            "ระวังการสร้างความเร่งด่วนหรือความกลัว",
            "ตรวจสอบตัวตนของผู้ติดต่อก่อนให้ข้อมูล",
            "อย่าดาวน์โหลดไฟล์หรือคลิกลิงก์จากคนแปลกหน้า",
        ],
    ),
    ThreatCategoryKey.MALWARE: ThreatCategory(
        key=ThreatCategoryKey.MALWARE,
        id=10,
        name="Malware/Ransomware",
        name_th="ไวรัส/แรนซัมแวร์",
        description="ซอฟต์แวร์ประสงค์ร้ายที่เข้ารหัสไฟล์หรือขโมยข้อมูล",
        severity=Severity.CRITICAL,
        recommendation="ห้ามติดตั้งแอปหรือไฟล์ APK จากลิงก์ในข้อความ",
        educational_tips=[
            "สำรองข้อมูลสำคัญเป็นประจำ",
            "อย่าดาวน์โหลดซอฟต์แวร์จากแหล่งที่ไม่น่าเชื่อถือ",
            "ใช้โปรแกรมป้องกันไวรัสที่ได้มาตรฐาน",
        ],
    ),
}

# First match wins, so list order is the tie-break priority.
CATEGORY_KEYWORDS: List[Tuple[ThreatCategoryKey, List[str]]] = [
    (ThreatCategoryKey.FINANCIAL_FRAUD, [
        "ธนาคาร", "บัญชี", "กสิกร", "กรุงเทพ", "กรุงไทย",
        "ทหารไทย", "ไทยพาณิชย์", "กรุงศรี", "ออมสิน",
    ]),
    (ThreatCategoryKey.ROMANCE_SCAM, ["รัก", "หวาน", "คิดถึง", "เหงา", "โชคชะตา"]),
    (ThreatCategoryKey.INVESTMENT_SCAM, ["ลงทุน", "หุ้น", "เทรด", "กำไร", "ผลตอบแทน", "ได้เงินเร็ว"]),
    (ThreatCategoryKey.GAMBLING, ["เครดิตฟรี", "ฟรีเครดิต", "สล็อต", "บาคาร่า", "แตกง่าย", "ถอนได้เลย"]),
    (ThreatCategoryKey.FAKE_DELIVERY, ["พัสดุ", "ขนส่ง", "dhl", "kerry", "flash express", "จัดส่งไม่ได้"]),
    (ThreatCategoryKey.GOVERNMENT_IMPERSONATION, ["ตำรวจ", "ไอบีเอ", "ศาล", "อัยการ", "ราชการ", "ปปง"]),
    (ThreatCategoryKey.CRYPTO_SCAM, ["บิทคอยน์", "คริปโต", "เหรียญดิจิทัล", "blockchain"]),
]

URGENCY_MARKERS: List[str] = ["ด่วน", "เร่งด่วน", "ทันที", "รีบ", "urgent"]

GENERIC_TIPS: List[str] = [
    "อย่าเปิดเผยรหัส OTP หรือรหัสผ่านให้ผู้อื่น",
    "หากสงสัยว่าถูกหลอก โทรสายด่วน 1441 เพื่อแจ้งเหตุ",
]

DEFAULT_IOCS: List[IOC] = [
    IOC(
        type=IOCType.DOMAIN,
        value="fake-bank-thailand.com",
        category=ThreatCategoryKey.FINANCIAL_FRAUD,
        severity=Severity.CRITICAL,
        source="LOCAL",
        description="Fake banking website impersonating Thai banks",
    ),
    IOC(
        type=IOCType.PHONE,
        value="+66812345678",
        category=ThreatCategoryKey.ROMANCE_SCAM,
        severity=Severity.HIGH,
        source="LOCAL",
        description="Phone number used in romance scams",
    ),
]

# Score contributions by severity
IOC_SEVERITY_RISK: Dict[Severity, float] = {
    Severity.CRITICAL: 0.4,
    Severity.HIGH: 0.3,
    Severity.MEDIUM: 0.2,
    Severity.LOW: 0.1,
}
CATEGORY_SEVERITY_RISK: Dict[Severity, float] = {
    Severity.CRITICAL: 0.3,
    Severity.HIGH: 0.2,
    Severity.MEDIUM: 0.1,
    Severity.LOW: 0.05,
}
URGENCY_RISK: float = 0.1
