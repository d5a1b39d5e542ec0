"""Simple two-language (ko/en) translation helper."""

_STRINGS: dict[str, dict[str, str]] = {
    "page_title": {
        "ko": "그날 밤 달",
        "en": "ThatNightMoon",
    },
    "label_date": {
        "ko": "날짜",
        "en": "Date",
    },
    "label_time": {
        "ko": "시각",
        "en": "Time",
    },
    "label_lat": {
        "ko": "위도 (°)",
        "en": "Latitude (°)",
    },
    "label_lon": {
        "ko": "경도 (°)",
        "en": "Longitude (°)",
    },
    "label_elevation": {
        "ko": "고도 (m)",
        "en": "Elevation (m)",
    },
    "label_scrub": {
        "ko": "시간 여행",
        "en": "Time Travel",
    },
    "label_orientation": {
        "ko": "방향",
        "en": "Orientation",
    },
    "orientation_phase": {
        "ko": "위상",
        "en": "Phase",
    },
    "orientation_sky": {
        "ko": "내 하늘",
        "en": "My sky",
    },
    "label_speed": {
        "ko": "재생 속도 (일/초)",
        "en": "Playback (days/sec)",
    },
    "btn_locate": {
        "ko": "📍 내 위치",
        "en": "📍 Locate me",
    },
    "btn_locating": {
        "ko": "📍 위치 찾는 중",
        "en": "📍 Locating",
    },
    "btn_located": {
        "ko": "✓ 내 위치",
        "en": "✓ Located",
    },
    "location_denied": {
        "ko": "위치 정보를 가져올 수 없어요. 좌표를 직접 입력해주세요.",
        "en": "Location unavailable. Enter coordinates manually.",
    },
    "readout_location": {
        "ko": "위치",
        "en": "Location",
    },
    "readout_illumination": {
        "ko": "밝은 면",
        "en": "Illumination",
    },
    "readout_distance": {
        "ko": "거리",
        "en": "Distance",
    },
    "readout_age": {
        "ko": "월령",
        "en": "Moon age",
    },
    "readout_angles": {
        "ko": "시차각 {q}° · 밝은 가장자리 {chi}° · 극 {pole}°",
        "en": "Parallactic {q}° · bright limb {chi}° · pole {pole}°",
    },
    "readout_libration": {
        "ko": "칭동 위도 {mlat}° · 경도 {mlon}°",
        "en": "Libration lat {mlat}° · lon {mlon}°",
    },
    "scrub_past": {
        "ko": "-30일",
        "en": "-30 days",
    },
    "scrub_now": {
        "ko": "지금",
        "en": "Now",
    },
    "scrub_future": {
        "ko": "+30일",
        "en": "+30 days",
    },
    "New Moon": {
        "ko": "삭",
        "en": "New Moon",
    },
    "Waxing Crescent": {
        "ko": "초승달",
        "en": "Waxing Crescent",
    },
    "First Quarter": {
        "ko": "상현달",
        "en": "First Quarter",
    },
    "Waxing Gibbous": {
        "ko": "차가는 달",
        "en": "Waxing Gibbous",
    },
    "Full Moon": {
        "ko": "보름달",
        "en": "Full Moon",
    },
    "Waning Gibbous": {
        "ko": "기우는 달",
        "en": "Waning Gibbous",
    },
    "Last Quarter": {
        "ko": "하현달",
        "en": "Last Quarter",
    },
    "Waning Crescent": {
        "ko": "그믐달",
        "en": "Waning Crescent",
    },
    "Unknown": {
        "ko": "알 수 없음",
        "en": "Unknown",
    },
}


def t(key: str, lang: str) -> str:
    """Return the translated string for key in lang.

    Falls back to 'en', then to the key itself if not found.
    """
    entry = _STRINGS.get(key)
    if entry is None:
        return key
    return entry.get(lang) or entry.get("en") or key
