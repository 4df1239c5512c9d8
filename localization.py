class Translator:
    def __init__(self) -> None:
        self.language = "zh-TW"
        self.translations = {
            "zh-TW": {},
            "en": {
                "選擇日期": "Date",
                "今日身體狀況": "How does your body feel today?",
                "選擇復健動作": "Exercise",
                "搜尋動作": "Search exercises",
                "執行側邊": "Side",
                "負重(kg)": "Weight (kg)",
                "次數": "Reps",
                "時間": "Time",
                "阻力": "Resistance",
                "坡度": "Slope",
                "速度": "Speed",
                "總組數": "Sets",
                "動作備註": "Notes",
                "確定新增紀錄": "Add entry",
                "儲存修改": "Save changes",
                "取消修改": "Cancel edit",
                "修改": "Edit",
                "刪除": "Delete",
                "刪除當日": "Delete day",
                "清空所有數據": "Delete everything",
                "歷史復健日誌": "History",
                "未填寫狀況": "No status recorded",
                "雲端同步": "Cloud sync",
                "上傳": "Upload",
                "從雲端還原": "Restore from cloud",
                "匯出": "Export",
                "請先選擇動作": "Please select an exercise first",
                "連線失敗": "Connection failed",
                "目前沒有紀錄": "There are no records yet",
                "輸入有誤": "Invalid input",
            },
        }

    def set_language(self, lang: str) -> None:
        self.language = lang

    def gettext(self, key: str) -> str:
        return self.translations.get(self.language, {}).get(key, key)

translator = Translator()
