"""
Restaurant content used by the chat assistant: the system prompt, the
static menu reply served when no provider answers, and the public
restaurant profile.
"""

RESTAURANT_NAME = "Ẩm Thực Phương Nam"

RESTAURANT_CONTEXT = """
Bạn là trợ lý AI của nhà hàng "Ẩm Thực Phương Nam" chuyên món ăn miền Nam.

MENU NHÀ HÀNG:
KHAI VỊ: Gỏi Ngó Sen Tôm Thịt (85k), Chả Giò Phương Nam (75k)
MÓN CHÍNH: Cá Lóc Nướng Trui (185k), Sườn Nướng Chao (165k)
CANH LẨU: Lẩu Mắm (250k), Lẩu Cá Kèo (225k)
CƠM BÚN: Bánh Xèo Miền Tây (95k), Cơm Cháy Sườn Rim (125k)
TRÁNG MIỆNG: Chè Bắp (45k)
ĐỒ UỐNG: Nước Sâm Lạnh (35k), Trà Tắc (30k)

Hãy tư vấn món ăn thân thiện, nói giá cụ thể, chỉ giới thiệu món có trong menu.
""".strip()

FALLBACK_MENU = """
Chào bạn! Chào mừng đến với Ẩm Thực Phương Nam! 🍽️

Nhà hàng chúng tôi có các món ngon sau:

🥗 KHAI VỊ:
• Gỏi Ngó Sen Tôm Thịt - 85.000đ
• Chả Giò Phương Nam - 75.000đ

🍖 MÓN CHÍNH:
• Cá Lóc Nướng Trui - 185.000đ
• Sườn Nướng Chao - 165.000đ

🍲 CANH & LẨU:
• Lẩu Mắm - 250.000đ
• Lẩu Cá Kèo - 225.000đ

🍚 CƠM & BÚN:
• Bánh Xèo Miền Tây - 95.000đ
• Cơm Cháy Sườn Rim - 125.000đ

🍮 TRÁNG MIỆNG:
• Chè Bắp - 45.000đ

🥤 ĐỒ UỐNG:
• Nước Sâm Lạnh - 35.000đ
• Trà Tắc - 30.000đ

Bạn muốn thử món nào? Tôi có thể tư vấn thêm! 😊
""".strip()

DESCRIPTION_UNAVAILABLE = "Không thể tạo mô tả cho món ăn này."

DESCRIPTION_PROMPT = """
Tạo mô tả hấp dẫn cho món ăn "{food_name}" của nhà hàng Ẩm Thực Phương Nam.

Thông tin món ăn:
- Tên món: {food_name}
- Nguyên liệu: {ingredients}
- Danh mục: {category}

Yêu cầu:
- Mô tả ngắn gọn (2-3 câu)
- Nhấn mạnh hương vị đặc trưng
- Phong cách miền Nam
- Tạo cảm giác thèm ăn

Chỉ trả về mô tả, không cần thêm thông tin khác.
""".strip()

NO_INFO = "Không có thông tin"

RESTAURANT_INFO = {
    "name": RESTAURANT_NAME,
    "description": "Nhà hàng chuyên về các món ăn truyền thống miền Nam Việt Nam",
    "specialties": ["Phở Bò", "Bún Bò Huế", "Bánh Xèo", "Gỏi Cuốn", "Cơm Tấm", "Bánh Khọt"],
    "contact": {
        "phone": "0123-456-789",
        "email": "info@amthucphuongnam.com",
        "address": "123 Đường ABC, Quận XYZ, TP.HCM",
    },
    "hours": {
        "monday": "10:00 - 22:00",
        "tuesday": "10:00 - 22:00",
        "wednesday": "10:00 - 22:00",
        "thursday": "10:00 - 22:00",
        "friday": "10:00 - 22:00",
        "saturday": "09:00 - 23:00",
        "sunday": "09:00 - 23:00",
    },
    "features": [
        "Không gian ấm cúng",
        "Hương vị đậm đà truyền thống",
        "Nguyên liệu tươi ngon",
        "Phục vụ tận tình",
        "Giá cả hợp lý",
    ],
}

SUGGESTED_QUESTIONS = [
    "Nhà hàng có những món ăn gì đặc biệt?",
    "Giờ mở cửa của nhà hàng như thế nào?",
    "Tôi muốn đặt bàn cho 4 người",
    "Món nào phù hợp cho người ăn chay?",
    "Giá cả các món ăn như thế nào?",
    "Nhà hàng có giao hàng tận nơi không?",
    "Có combo nào cho gia đình không?",
    "Món nào cay nhất trong menu?",
    "Nhà hàng có chỗ đậu xe không?",
    "Có thể thanh toán bằng thẻ không?",
]
