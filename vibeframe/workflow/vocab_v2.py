"""Phase-based step vocabulary (current).

Mode codes: G=guided, E=expert, A=auto, C=chat. Guided asks about goals and lets the
collaborator infer implementation; expert asks the implementation questions directly;
auto asks the minimum and applies defaults.
"""

from __future__ import annotations

from vibeframe.models.wireframe import WorkflowAnswers
from vibeframe.workflow.catalog import (
    CHOICE,
    CONFIRM,
    CONFIRM_REVISE,
    CONFIRM_YES,
    GENERATE,
    MULTI,
    OPEN,
    TERMINAL,
    TEXT,
    StepSpec,
    WorkflowCatalog,
    mode_set,
    options,
    register_catalog,
)

PHASES = [
    "프로필",
    "서비스 이해",
    "첫인상",
    "콘텐츠",
    "내비게이션",
    "플랫폼",
    "스타일",
    "마무리",
]


def _is_mobile(answers: WorkflowAnswers) -> bool:
    return answers.get("service_info.platform") in ("mobile_app", "tablet_app")


def _uses_bottom_tabs(answers: WorkflowAnswers) -> bool:
    return _is_mobile(answers) and answers.get("platform_info.mobile_nav") == "bottom_tabs"


def _is_dashboard(answers: WorkflowAnswers) -> bool:
    return (
        answers.get("service_info.type") in ("dashboard", "saas")
        or answers.get("service_info.platform") == "webapp_saas"
    )


def _is_ecommerce(answers: WorkflowAnswers) -> bool:
    return answers.get("service_info.type") == "ecommerce"


def _has_section(name: str):
    def check(answers: WorkflowAnswers) -> bool:
        return name in (answers.get("structure_info.sections") or [])

    return check


STEPS = [
    StepSpec(
        id="open",
        phase=-1,
        modes=mode_set("C"),
        kind=OPEN,
        label="자유 대화",
        description="Free conversation; every turn may create or modify elements.",
    ),
    # Phase 0: profile
    StepSpec(
        id="profile_role",
        phase=0,
        modes=mode_set("GEA"),
        kind=CHOICE,
        label="역할",
        prompt="당신은 누구인가요?",
        options=options(
            ("디자이너", "designer"),
            ("개발자", "developer"),
            ("기획자/PM", "pm"),
            ("창업자", "founder"),
            ("마케터", "marketer"),
        ),
        field="user_profile.role",
    ),
    StepSpec(
        id="profile_purpose",
        phase=0,
        modes=mode_set("GEA"),
        kind=CHOICE,
        label="목적",
        prompt="이 와이어프레임으로 뭘 하고 싶어요?",
        options=options(
            ("아이디어를 빠르게 시각화", "quick_visualization"),
            ("팀/클라이언트와 공유", "share"),
            ("개발 전 화면 설계", "pre_development"),
            ("투자자 피칭", "pitch"),
        ),
        field="user_profile.purpose",
    ),
    StepSpec(
        id="profile_mode",
        phase=0,
        modes=mode_set("GEA"),
        kind=CHOICE,
        label="진행 방식",
        prompt="어떤 스타일로 진행하고 싶어요?",
        options=options(
            ("자유롭게 대화하면서", "chat"),
            ("가이드 받으면서", "guided"),
            ("세부사항 직접 결정하면서", "expert"),
            ("AI에게 맡기고 빠르게", "auto"),
        ),
        field="user_profile.mode",
    ),
    # Phase 1: service understanding
    StepSpec(
        id="service_platform",
        phase=1,
        modes=mode_set("GE"),
        kind=CHOICE,
        label="플랫폼",
        prompt="어떤 플랫폼용 와이어프레임인가요?",
        options=options(
            ("데스크톱 웹사이트", "website_desktop"),
            ("모바일 앱", "mobile_app"),
            ("반응형 웹앱", "web_app_responsive"),
            ("SaaS 웹앱", "webapp_saas"),
            ("태블릿 앱", "tablet_app"),
        ),
        field="service_info.platform",
    ),
    StepSpec(
        id="service_type",
        phase=1,
        modes=mode_set("GE"),
        kind=CHOICE,
        label="서비스 종류",
        prompt="어떤 서비스인가요?",
        options=options(
            ("랜딩 페이지", "landing"),
            ("쇼핑몰", "ecommerce"),
            ("대시보드", "dashboard"),
            ("SaaS", "saas"),
            ("블로그", "blog"),
            ("포트폴리오", "portfolio"),
            ("커뮤니티", "community"),
            ("기타", "other"),
        ),
        field="service_info.type",
    ),
    StepSpec(
        id="service_description",
        phase=1,
        modes=mode_set("GEA"),
        kind=TEXT,
        label="한 줄 설명",
        prompt="서비스를 한 줄로 설명해주세요.",
        field="service_info.description",
    ),
    StepSpec(
        id="service_goal",
        phase=1,
        modes=mode_set("G"),
        kind=TEXT,
        label="핵심 목표",
        prompt="이 서비스의 핵심 목표는 무엇인가요?",
        field="service_info.goal",
    ),
    StepSpec(
        id="service_target",
        phase=1,
        modes=mode_set("G"),
        kind=TEXT,
        label="타겟 사용자",
        prompt="주요 사용자는 누구인가요?",
        field="service_info.target",
    ),
    StepSpec(
        id="service_context",
        phase=1,
        modes=mode_set("G"),
        kind=TEXT,
        label="사용 상황",
        prompt="사용자는 주로 어떤 상황에서 이 서비스를 쓰나요?",
        field="service_info.context",
    ),
    # Phase 2: first impression and core flow
    StepSpec(
        id="impression_feeling",
        phase=2,
        modes=mode_set("GE"),
        kind=CHOICE,
        label="첫 화면 느낌",
        prompt="첫 화면에서 어떤 느낌을 주고 싶나요?",
        options=options(
            ("큰 이미지로 시선 집중", "image_focus"),
            ("핵심 메시지 강조", "message_focus"),
            ("바로 기능 보여주기", "feature_focus"),
            ("숫자와 데이터로 신뢰 주기", "data_focus"),
        ),
        field="structure_info.hero_style",
    ),
    StepSpec(
        id="impression_action",
        phase=2,
        modes=mode_set("GE"),
        kind=CHOICE,
        label="핵심 액션",
        prompt="사용자가 가장 먼저 해야 할 행동은 무엇인가요?",
        options=options(
            ("회원가입", "signup"),
            ("구매", "purchase"),
            ("문의하기", "contact"),
            ("둘러보기", "browse"),
            ("다운로드", "download"),
        ),
        field="structure_info.primary_action",
    ),
    StepSpec(
        id="impression_info",
        phase=2,
        modes=mode_set("E"),
        kind=TEXT,
        label="필요한 정보",
        prompt="첫 화면에 꼭 보여야 할 정보는 무엇인가요?",
        field="structure_info.key_info",
    ),
    # Phase 3: content blocks
    StepSpec(
        id="content_sections",
        phase=3,
        modes=mode_set("GE"),
        kind=MULTI,
        label="콘텐츠 블록",
        prompt="어떤 섹션이 필요한가요? (여러 개 선택 가능)",
        options=options(
            ("기능 소개", "features"),
            ("가격", "pricing"),
            ("고객 후기", "testimonials"),
            ("FAQ", "faq"),
            ("팀 소개", "team"),
            ("문의 폼", "contact"),
            ("블로그/뉴스", "blog"),
        ),
        field="structure_info.sections",
    ),
    StepSpec(
        id="content_features",
        phase=3,
        modes=mode_set("E"),
        kind=CHOICE,
        label="기능 소개 상세",
        prompt="기능 소개 섹션을 어떻게 구성할까요?",
        options=options(
            ("아이콘 + 짧은 설명 그리드", "icon_grid"),
            ("이미지와 설명 교차 배치", "alternating"),
            ("탭으로 전환", "tabs"),
        ),
        field="structure_info.features_detail",
        when=_has_section("features"),
    ),
    StepSpec(
        id="content_pricing",
        phase=3,
        modes=mode_set("E"),
        kind=CHOICE,
        label="가격 정보",
        prompt="가격표 레이아웃은 어떻게 할까요?",
        options=options(
            ("플랜 카드 3개", "three_tiers"),
            ("기능 비교 표", "comparison_table"),
            ("단일 가격", "single"),
        ),
        field="structure_info.pricing_layout",
        when=_has_section("pricing"),
    ),
    # Phase 4: navigation and structure
    StepSpec(
        id="nav_menu",
        phase=4,
        modes=mode_set("GE"),
        kind=CHOICE,
        label="메뉴 구성",
        prompt="메인 메뉴는 몇 개가 좋을까요?",
        options=options(
            ("3개 이하", 3),
            ("4-5개", 5),
            ("6개 이상", 7),
        ),
        field="structure_info.menu_count",
    ),
    StepSpec(
        id="nav_header",
        phase=4,
        modes=mode_set("E"),
        kind=MULTI,
        label="헤더 구성",
        prompt="헤더에 어떤 요소가 필요한가요? (여러 개 선택 가능)",
        options=options(
            ("로고", "logo"),
            ("검색", "search"),
            ("로그인", "login"),
            ("장바구니", "cart"),
            ("알림", "notifications"),
            ("CTA 버튼", "cta"),
        ),
        field="structure_info.header_elements",
    ),
    StepSpec(
        id="nav_footer",
        phase=4,
        modes=mode_set("E"),
        kind=CHOICE,
        label="푸터 구성",
        prompt="푸터는 어떤 스타일로 할까요?",
        options=options(
            ("최소한으로", "minimal"),
            ("링크 여러 열", "columns"),
            ("뉴스레터 구독 포함", "newsletter"),
        ),
        field="structure_info.footer_style",
    ),
    # Phase 5: platform-specific branches
    StepSpec(
        id="platform_mobile_nav",
        phase=5,
        modes=mode_set("GE"),
        kind=CHOICE,
        label="모바일 내비게이션",
        prompt="모바일 내비게이션은 어떤 방식으로 할까요?",
        options=options(
            ("하단 탭 바", "bottom_tabs"),
            ("햄버거 메뉴", "hamburger"),
            ("상단 탭", "top_tabs"),
        ),
        field="platform_info.mobile_nav",
        when=_is_mobile,
    ),
    StepSpec(
        id="platform_mobile_bottom",
        phase=5,
        modes=mode_set("E"),
        kind=CHOICE,
        label="바텀 내비",
        prompt="하단 탭은 몇 개로 할까요?",
        options=options(("3개", 3), ("4개", 4), ("5개", 5)),
        field="platform_info.bottom_nav_count",
        when=_uses_bottom_tabs,
    ),
    StepSpec(
        id="platform_mobile_fab",
        phase=5,
        modes=mode_set("E"),
        kind=CHOICE,
        label="FAB",
        prompt="플로팅 액션 버튼(FAB)이 필요한가요?",
        options=options(("네", True), ("아니요", False)),
        field="platform_info.has_fab",
        when=_is_mobile,
    ),
    StepSpec(
        id="platform_dashboard",
        phase=5,
        modes=mode_set("GE"),
        kind=MULTI,
        label="대시보드 요소",
        prompt="대시보드에 어떤 요소가 필요한가요? (여러 개 선택 가능)",
        options=options(
            ("KPI 카드", "kpi_cards"),
            ("차트", "charts"),
            ("데이터 테이블", "data_table"),
            ("활동 피드", "activity_feed"),
            ("필터", "filters"),
        ),
        field="platform_info.dashboard_elements",
        when=_is_dashboard,
    ),
    StepSpec(
        id="platform_dashboard_chart",
        phase=5,
        modes=mode_set("E"),
        kind=MULTI,
        label="차트 종류",
        prompt="어떤 차트를 사용할까요? (여러 개 선택 가능)",
        options=options(
            ("선 그래프", "line"),
            ("막대 그래프", "bar"),
            ("파이 차트", "pie"),
            ("영역 차트", "area"),
        ),
        field="platform_info.chart_types",
        when=_is_dashboard,
    ),
    StepSpec(
        id="platform_ecommerce",
        phase=5,
        modes=mode_set("GE"),
        kind=CHOICE,
        label="상품 레이아웃",
        prompt="상품 목록은 어떤 레이아웃으로 할까요?",
        options=options(
            ("2열 그리드", "grid_2"),
            ("3열 그리드", "grid_3"),
            ("4열 그리드", "grid_4"),
            ("리스트", "list"),
        ),
        field="platform_info.product_grid",
        when=_is_ecommerce,
    ),
    StepSpec(
        id="platform_ecommerce_card",
        phase=5,
        modes=mode_set("E"),
        kind=MULTI,
        label="상품 카드",
        prompt="상품 카드에 어떤 정보를 표시할까요? (여러 개 선택 가능)",
        options=options(
            ("이미지", "image"),
            ("가격", "price"),
            ("평점", "rating"),
            ("할인 배지", "discount_badge"),
            ("장바구니 버튼", "cart_button"),
        ),
        field="platform_info.product_card_info",
        when=_is_ecommerce,
    ),
    # Phase 6: style and tone
    StepSpec(
        id="style_tone",
        phase=6,
        modes=mode_set("GEA"),
        kind=CHOICE,
        label="전체 느낌",
        prompt="전체적인 느낌은 어떻게 할까요?",
        options=options(
            ("밝고 깔끔하게", "light_clean"),
            ("어둡고 모던하게", "dark_modern"),
            ("컬러풀하게", "colorful"),
            ("미니멀하게", "minimal"),
            ("신뢰감 있게", "corporate"),
            ("친근하게", "friendly"),
        ),
        field="style_info.tone",
    ),
    StepSpec(
        id="style_density",
        phase=6,
        modes=mode_set("E"),
        kind=CHOICE,
        label="정보 밀도",
        prompt="정보 밀도는 어느 정도가 좋을까요?",
        options=options(
            ("여유롭게", "spacious"),
            ("균형 있게", "balanced"),
            ("촘촘하게", "compact"),
        ),
        field="style_info.density",
    ),
    StepSpec(
        id="style_corners",
        phase=6,
        modes=mode_set("E"),
        kind=CHOICE,
        label="모서리 스타일",
        prompt="모서리 스타일은 어떻게 할까요?",
        options=options(
            ("각지게", "sharp"),
            ("살짝 둥글게", "slightly_rounded"),
            ("둥글게", "rounded"),
            ("알약형", "pill"),
        ),
        field="style_info.corners",
    ),
    StepSpec(
        id="style_theme",
        phase=6,
        modes=mode_set("GE"),
        kind=CHOICE,
        label="테마 컬러",
        prompt="와이어프레임 테마를 선택해주세요.",
        options=options(
            ("Classic Wireframe", "classic_wireframe"),
            ("High Contrast", "high_contrast"),
            ("Blueprint", "blueprint"),
            ("AI에게 맡기기", "auto"),
        ),
        field="style_info.theme",
    ),
    # Phase 7: final
    StepSpec(
        id="final_confirm",
        phase=7,
        modes=mode_set("GEA"),
        kind=CONFIRM,
        label="최종 확인",
        prompt="이대로 와이어프레임을 만들까요?",
        options=options(
            ("네, 만들어주세요", CONFIRM_YES),
            ("수정할래요", CONFIRM_REVISE),
        ),
    ),
    StepSpec(
        id="building",
        phase=7,
        modes=mode_set("GEA"),
        kind=GENERATE,
        label="생성 중",
        description="Generate the full element collection from the collected answers.",
    ),
    StepSpec(
        id="complete",
        phase=7,
        modes=mode_set("GEAC"),
        kind=TERMINAL,
        label="완료",
    ),
]

CATALOG = WorkflowCatalog(
    version="v2",
    phases=PHASES,
    steps=STEPS,
    description="Phase-based elicitation with chat, guided, expert and auto modes",
)

register_catalog(CATALOG)
