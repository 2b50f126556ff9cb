"""Localized user-facing notices."""

NOTICES: dict[str, dict[str, str]] = {
    "en": {
        "glitch": "Oops! My beauty brain had a tiny glitch. Let's try again! ✨",
        "quality_fail": "Quality Check Failed",
        "too_dark": "Too dark",
        "too_bright": "Too bright",
        "unreadable": "We couldn't read that image. Please try another photo.",
        "analysis_failed": "We couldn't analyze that photo. Please retake it.",
        "generation_failed": "Generation failed.",
        "not_ready": "Tell me a bit more about your style and occasion first.",
        "invalid_stage": "That action isn't available right now.",
        "unknown_style": "That style is no longer available.",
        "busy": "Still working on your last look.",
        "stale": "That result is out of date.",
        "save_failed": "Couldn't save this look. Please try again.",
        "saved": "Saved",
        "tier_strict": "Perfect Matches Found",
        "tier_relaxed": "Matching Face Shape",
        "tier_none": "Showing all styles",
    },
    "zh": {
        "glitch": "哎呀！我的美妆大脑出了一点小状况。我们再试一次？✨",
        "quality_fail": "质量检测未通过",
        "too_dark": "光线太暗",
        "too_bright": "光线太亮",
        "unreadable": "无法读取这张图片，请换一张照片。",
        "analysis_failed": "无法分析这张照片，请重新拍摄。",
        "generation_failed": "生成失败。",
        "not_ready": "请先告诉我更多关于您的风格和场合。",
        "invalid_stage": "当前无法执行该操作。",
        "unknown_style": "该风格已不可用。",
        "busy": "正在生成上一个妆容，请稍候。",
        "stale": "该结果已过期。",
        "save_failed": "保存失败，请重试。",
        "saved": "已保存",
        "tier_strict": "找到完美匹配的风格",
        "tier_relaxed": "匹配您的脸型",
        "tier_none": "显示所有风格",
    },
}


def notice(key: str, language: str = "en") -> str:
    """Return the notice for a key, falling back to English and then the key."""
    catalog = NOTICES.get(language, NOTICES["en"])
    return catalog.get(key) or NOTICES["en"].get(key, key)
