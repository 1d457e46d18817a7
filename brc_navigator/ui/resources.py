# resources.py

import streamlit as st

RESOURCES = [
    {
        "title": "Burning Man Packing Lists",
        "description": "Essential items to bring to the playa",
        "icon": "🎒",
        "links": [
            ("List 1", "https://docs.google.com/document/d/1KL__X9aNPQom54wifFTBCNhzwG4v_ZxmFBerSuXc_Uw/edit?tab=t.0#heading=h.edwibwrpdox1"),
            ("List 2", "https://docs.google.com/spreadsheets/d/1t2KvCRFsTvoLiFeo9ewsCgPUFzfgo0Re3AgDq05AdlU/edit?usp=sharing"),
        ],
    },
    {
        "title": "BurnerMap",
        "description": "Find your pals on the playa",
        "icon": "🗺️",
        "links": [("Open", "https://www.burnermap.com/welcome")],
    },
    {
        "title": "FoodsList",
        "description": "Plan your meals for the burn",
        "icon": "🍲",
        "links": [("Open", "https://foodslist.jacobcole.net/")],
    },
    {
        "title": "Quality Products",
        "description": "Recommended gear for Burning Man",
        "icon": "⛺",
        "links": [("Open", "https://docs.google.com/document/d/1LAao0_9G2e5QhIP_4RSH7rmu2AUxGzuRdj1xf7NmIa0/edit?tab=t.0")],
    },
    {
        "title": "Burning Man Issue Tracker",
        "description": "Community-sourced solutions for common playa problems",
        "icon": "🔧",
        "links": [("Open", "https://docs.google.com/document/d/1J2s35Fd2cpXPvs8VWIq6LFLMNVurCyXRk94uaCLbvoA/edit?tab=t.0#heading=h.fmrpavgg0t70")],
    },
]


def resource_markdown(resource: dict) -> str:
    links = " • ".join(f"[{text}]({url})" for text, url in resource["links"])
    return f"{resource['icon']} **{resource['title']}**  \n{resource['description']}  \n{links}"


def render_resources() -> None:
    st.subheader("🔥 Burning Man Resources")
    cols = st.columns(2)
    for i, resource in enumerate(RESOURCES):
        with cols[i % 2]:
            st.markdown(resource_markdown(resource))
