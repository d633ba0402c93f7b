"""kpi/demo.py — sample resolution excerpt for `vnp targets --demo`."""

DEMO_TEXT = (
    "Về kinh tế: phấn đấu tốc độ tăng trưởng GDP cả nước bình quân đạt khoảng 7,0%/năm "
    "giai đoạn 2021 - 2030. Đến năm 2030, GDP bình quân đầu người theo giá hiện hành "
    "đạt khoảng 7.500 USD. Tỷ trọng trong GDP của khu vực dịch vụ đạt trên 50%, khu vực "
    "công nghiệp - xây dựng trên 40%, khu vực nông, lâm, thủy sản dưới 10%. Tốc độ tăng "
    "năng suất lao động xã hội bình quân đạt trên 6,5%/năm.\n"
    "Về xã hội: Đến năm 2030, tỷ lệ lao động qua đào tạo có bằng cấp, chứng chỉ đạt "
    "35 - 40%. Tỷ lệ thất nghiệp ở khu vực thành thị dưới 4%. Tỷ lệ nghèo đa chiều duy "
    "trì mức giảm 1 - 1,5%/năm.\n"
    "Về môi trường: Đến năm 2030, tỷ lệ che phủ rừng ổn định ở mức 42%. Tỷ lệ xử lý và "
    "tái sử dụng nước thải ra môi trường lưu vực các sông đạt trên 70%.\n"
    "Về hạ tầng: Phấn đấu đến năm 2030 có ít nhất 5.000 km đường bộ cao tốc; 100% xã có "
    "đường ô tô đến trung tâm xã được trải nhựa hoặc bê tông."
)
