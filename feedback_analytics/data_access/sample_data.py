# feedback_analytics/data_access/sample_data.py
"""
Static sample feedback set served when the feedback store is unavailable.

Rows are kept in the two shapes the store has historically produced (legacy
capitalized export columns and snake_case columns) and go through the same
normalizer as live rows.
"""

from typing import List, Optional

from feedback_analytics.analytics.normalizer import normalize_records
from feedback_analytics.models.schemas import FeedbackRecord


SAMPLE_ROWS = [
    {
        "ID": "1",
        "Link": "",
        "Post Copy": "Galaxy A06 warna hijau masih ada kak?",
        "Date": "5-Mar-2025",
        "Time": "12;59",
        "Date responses": "5-Mar-2025",
        "Account ID": "Arjuna Rajendra",
        "Category": "Im",
        "Type of post": "Queries",
        "Topic": "Product Info",
        "Product": "Galaxy A06",
        "Sentiment": "Neutral",
        "Source": "DM Facebook",
        "Reply": "Halo kak Arjuna, Galaxy A06 Light Green tersedia di toko resmi kami.",
        "Status": "Clear",
        "Details": "Availability",
    },
    {
        "ID": "2",
        "Link": "",
        "Post Copy": "S25 reguler warna coral red ready di Indonesia?",
        "Date": "4-Mar-2025",
        "Time": "23;28",
        "Date responses": "5-Mar-2025",
        "Account ID": "Tyo Prasetyo",
        "Category": "Im",
        "Type of post": "Queries",
        "Topic": "Product Info",
        "Product": "Galaxy S25",
        "Sentiment": "Neutral",
        "Source": "DM Facebook",
        "Reply": "Hi kak Tyo, Galaxy S25 512GB Coralred sudah tersedia.",
        "Status": "Clear",
        "Details": "Availability",
    },
    {
        "ID": "14",
        "Link": "",
        "Post Copy": "Pre order dari 25 Januari sampai sekarang belum bisa pickup",
        "Date": "2-Mar-2025",
        "Time": "16;48",
        "Date responses": "5-Mar-2025",
        "Account ID": "Agus Tinus",
        "Category": "Im",
        "Type of post": "Complaint",
        "Topic": "Product Release",
        "Product": "Galaxy S25",
        "Sentiment": "Negative",
        "Source": "DM Facebook",
        "Reply": "Hi kak Agus, mohon maaf atas ketidaknyamanannya. Tim kami sedang memproses pesanan kamu.",
        "Status": "Clear",
        "Details": "Delayed PO",
    },
    {
        "ID": "40",
        "Link": "",
        "Post Copy": "Z Flip lcd nya ga tahan lama, banyak yang kena lcdnya",
        "Date": "12-Mar-2025",
        "Time": "12;7",
        "Date responses": "12-Mar-2025",
        "Account ID": "Ther Llibano",
        "Category": "Im",
        "Type of post": "Complaint",
        "Topic": "Technical",
        "Product": "Galaxy Z Flip",
        "Sentiment": "Negative",
        "Source": "DM Facebook",
        "Reply": "Hi kak Ther, mohon maaf atas kendala pada layar Galaxy Z Flip kamu.",
        "Status": "Clear",
        "Details": "",
    },
    {
        "ID": "42",
        "Link": "",
        "Post Copy": "Setelah update S22 saya tiba-tiba muncul garis hijau",
        "Date": "11-Mar-2025",
        "Time": "23;51",
        "Date responses": "12-Mar-2025",
        "Account ID": "Rika Silvia",
        "Category": "Im",
        "Type of post": "Complaint",
        "Topic": "Technical",
        "Product": "Galaxy S22",
        "Sentiment": "Negative",
        "Source": "DM Facebook",
        "Reply": "Hi kak Rika, silakan kunjungi service center terdekat untuk pengecekan.",
        "Status": "Clear",
        "Details": "Issue after update",
    },
    {
        "id": "51",
        "link": "",
        "post_copy": "Antrian service center lama sekali, sudah dua minggu belum ada kabar",
        "date": "2025-03-13",
        "time": "09:15:00",
        "date_responses": "",
        "account_id": "Dewi Lestari",
        "customer_id": "C-1051",
        "category": "General",
        "type_of_post": "Complaint",
        "topic": "Service Center",
        "product": "Galaxy A55",
        "sentiment": "Negative",
        "source": "Comment Facebook",
        "reply": "",
        "status": "Pending",
        "details": "",
    },
    {
        "id": "52",
        "link": "",
        "post_copy": "Harga Tab S9 turun lagi ga kak bulan ini?",
        "date": "2025-03-13",
        "time": "14:02:00",
        "date_responses": "2025-03-14",
        "account_id": "Bima Saputra",
        "customer_id": "C-1052",
        "category": "General",
        "type_of_post": "Queries",
        "topic": "Pricing",
        "product": "Galaxy Tab S9",
        "sentiment": "Neutral",
        "source": "Comment Facebook",
        "reply": "Hi kak Bima, pantau promo terbaru di halaman resmi kami ya.",
        "status": "Clear",
        "details": "",
    },
    {
        "id": "53",
        "link": "",
        "post_copy": "Mantap, Galaxy S25 Ultra kameranya jernih banget",
        "date": "2025-03-10",
        "time": "19:40:00",
        "date_responses": "2025-03-10",
        "account_id": "Nadia Putri",
        "customer_id": "C-1053",
        "category": "General",
        "type_of_post": "Compliment",
        "topic": "Product Info",
        "product": "Galaxy S25 Ultra",
        "sentiment": "Positive",
        "source": "Comment Facebook",
        "reply": "Terima kasih kak Nadia, selamat berkreasi dengan Galaxy S25 Ultra!",
        "status": "Clear",
        "details": "",
    },
    {
        "id": "54",
        "link": "",
        "post_copy": "Smart TV saya tidak bisa connect ke aplikasi streaming",
        "date": "2025-03-09",
        "time": "20:11:00",
        "date_responses": "2025-03-10",
        "account_id": "Hendra Wijaya",
        "customer_id": "C-1054",
        "category": "Ctv",
        "type_of_post": "Complaint",
        "topic": "Technical",
        "product": "Smart TV Crystal UHD",
        "sentiment": "Negative",
        "source": "DM Facebook",
        "reply": "Hi kak Hendra, coba lakukan reset jaringan pada menu pengaturan ya.",
        "status": "Pending",
        "details": "",
    },
    {
        "id": "55",
        "link": "",
        "post_copy": "Asisten suara sekarang sudah paham bahasa Indonesia, keren",
        "date": "2025-03-08",
        "time": "08:30:00",
        "date_responses": "2025-03-08",
        "account_id": "Sari Handayani",
        "customer_id": "C-1055",
        "category": "Da",
        "type_of_post": "Compliment",
        "topic": "Product Info",
        "product": "Bixby",
        "sentiment": "Positive",
        "source": "Comment Facebook",
        "reply": "Terima kasih kak Sari atas dukungannya!",
        "status": "Clear",
        "details": "",
    },
    {
        "id": "56",
        "link": "",
        "post_copy": "Flash sale di e-commerce kemarin cepat habis, semoga ada lagi",
        "date": "2025-03-07",
        "time": "10:05:00",
        "date_responses": "2025-03-07",
        "account_id": "Rudi Hartono",
        "customer_id": "C-1056",
        "category": "General",
        "type_of_post": "Others",
        "topic": "E-commerce",
        "product": "Galaxy A35",
        "sentiment": "Positive",
        "source": "Comment Facebook",
        "reply": "Nantikan flash sale berikutnya ya kak Rudi!",
        "status": "Clear",
        "details": "",
    },
    {
        "id": "57",
        "link": "",
        "post_copy": "Display Galaxy A35 saya berkedip terus setelah jatuh",
        "date": "2025-03-06",
        "time": "17:45:00",
        "date_responses": "2025-03-07",
        "account_id": "Maya Anggraini",
        "customer_id": "C-1057",
        "category": "Im",
        "type_of_post": "Complaint",
        "topic": "Service Center",
        "product": "Galaxy A35",
        "sentiment": "Negative",
        "source": "DM Facebook",
        "reply": "Hi kak Maya, silakan bawa perangkat ke service center resmi terdekat.",
        "status": "Clear",
        "details": "",
    },
]


def get_sample_feedbacks() -> List[FeedbackRecord]:
    """Fresh normalized copy of the sample set."""
    return normalize_records(SAMPLE_ROWS)


def find_sample_feedback(feedback_id: str) -> Optional[FeedbackRecord]:
    for record in get_sample_feedbacks():
        if record.feedback_id == feedback_id:
            return record
    return None
