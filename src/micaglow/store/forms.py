"""Checkout forms. Validation runs before anything is written."""

import re

from django import forms

PHONE_RE = re.compile(r"^\+?[0-9][0-9 \-]{6,18}[0-9]$")


class CustomerInfoForm(forms.Form):
    customer_name = forms.CharField(max_length=255, strip=True)
    whatsapp_number = forms.CharField(max_length=20, strip=True)

    def clean_whatsapp_number(self):
        number = self.cleaned_data["whatsapp_number"]
        if not PHONE_RE.match(number):
            raise forms.ValidationError("Enter a valid WhatsApp number.")
        return number


class ShippingForm(CustomerInfoForm):
    customer_email = forms.EmailField(required=False)
    shipping_address = forms.CharField(widget=forms.Textarea, strip=True)
    shipping_city = forms.CharField(max_length=100, strip=True)
    shipping_province = forms.CharField(max_length=100, strip=True)
    shipping_zip_code = forms.CharField(max_length=20, required=False, strip=True)

